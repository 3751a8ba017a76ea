"""Emergency classifier - weighted keyword matching.

Maps free text to a disaster category, a severity and a 0-10 confidence.

Scoring:
- Every occurrence of a keyword inside the lowercased text adds the
  keyword's weight to its category's raw score.
- confidence = raw / max(word_count, 1) * confidence_scale, clamped.
- Highest confidence wins; ties go to the category declared first.
- At or below the emergency threshold the category is "general".

EmergencyClassifier.classify() is pure: no I/O, no logging, no state
between calls.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from dronex.shared.models import Severity
from .config import CONFIDENCE_CEILING, ClassifierConfig, SeverityThresholds
from .keyword_table import CategoryKeywords, KeywordTable, get_keyword_table

logger = logging.getLogger(__name__)

GENERAL_CATEGORY = "general"


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one utterance.

    Immutable - results are built fresh per utterance and never updated.
    """
    category: str
    severity: Severity
    confidence: float
    matched_keywords: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not 0.0 <= self.confidence <= CONFIDENCE_CEILING:
            raise ValueError(f"Confidence must be 0.0-{CONFIDENCE_CEILING}, got {self.confidence}")

    @property
    def is_emergency(self) -> bool:
        return self.category != GENERAL_CATEGORY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "category": self.category,
            "severity": self.severity.value,
            "confidence": round(self.confidence, 3),
            "matched_keywords": sorted(self.matched_keywords),
            "is_emergency": self.is_emergency,
        }


@dataclass(frozen=True)
class _CategoryScore:
    name: str
    confidence: float
    matched: FrozenSet[str]


class EmergencyClassifier:
    """Keyword classifier bound to one keyword table and set of thresholds.

    Safe to share between threads: the table, thresholds and config are
    immutable and classify() allocates everything it returns.
    """

    def __init__(
        self,
        table: Optional[KeywordTable] = None,
        thresholds: Optional[SeverityThresholds] = None,
        config: Optional[ClassifierConfig] = None,
    ):
        """Initialize classifier.

        Args:
            table: Keyword table (defaults to the process-wide table)
            thresholds: Severity bands
            config: Scoring configuration
        """
        self.table = table if table is not None else get_keyword_table()
        self.thresholds = thresholds or SeverityThresholds()
        self.config = config or ClassifierConfig()

        logger.info(
            "EMERGENCY_CLASSIFIER_INITIALIZED",
            extra={
                "keyword_table_version": self.config.keyword_table_version,
                "category_count": len(self.table),
                "keyword_count": self.table.keyword_count,
                "emergency_threshold": self.thresholds.EMERGENCY_MIN,
            }
        )

    def classify(self, text: Optional[str]) -> ClassificationResult:
        """Classify one utterance.

        Args:
            text: Message text or voice transcript; None is treated as ""

        Returns:
            ClassificationResult. Never raises for str or None input.
        """
        lowered = (text or "").lower()
        word_count = max(len(lowered.split()), 1)

        best: Optional[_CategoryScore] = None
        for category in self.table:
            score = self._score_category(category, lowered, word_count)
            # Strict > keeps the first-declared category on ties
            if best is None or score.confidence > best.confidence:
                best = score

        if best is None:
            return ClassificationResult(
                category=GENERAL_CATEGORY,
                severity=Severity.NONE,
                confidence=0.0,
            )

        if best.confidence <= self.thresholds.EMERGENCY_MIN:
            return ClassificationResult(
                category=GENERAL_CATEGORY,
                severity=Severity.NONE,
                confidence=best.confidence,
                matched_keywords=best.matched,
            )

        return ClassificationResult(
            category=best.name,
            severity=self.severity_for(best.confidence),
            confidence=best.confidence,
            matched_keywords=best.matched,
        )

    def severity_for(self, confidence: float) -> Severity:
        """Map a confidence score to its severity band."""
        if confidence <= self.thresholds.EMERGENCY_MIN:
            return Severity.NONE
        elif confidence <= self.thresholds.LOW_MAX:
            return Severity.LOW
        elif confidence <= self.thresholds.MEDIUM_MAX:
            return Severity.MEDIUM
        elif confidence <= self.thresholds.HIGH_MAX:
            return Severity.HIGH
        else:
            return Severity.CRITICAL

    def _score_category(
        self,
        category: CategoryKeywords,
        lowered: str,
        word_count: int,
    ) -> _CategoryScore:
        raw = 0.0
        matched = set()
        for keyword, weight in category.keywords:
            occurrences = lowered.count(keyword)
            if occurrences:
                raw += weight * occurrences
                matched.add(keyword)

        confidence = raw / word_count * self.config.confidence_scale
        confidence = min(max(confidence, 0.0), self.config.max_confidence)
        return _CategoryScore(name=category.name, confidence=confidence, matched=frozenset(matched))


# Module-level singleton over the process-wide keyword table
_classifier: Optional[EmergencyClassifier] = None


def get_classifier() -> EmergencyClassifier:
    """Get the singleton EmergencyClassifier instance."""
    global _classifier
    if _classifier is None:
        _classifier = EmergencyClassifier()
    return _classifier


def classify(text: Optional[str], table: Optional[KeywordTable] = None) -> ClassificationResult:
    """Convenience function to classify text.

    Args:
        text: Raw input text
        table: Keyword table to use instead of the process-wide one

    Returns:
        ClassificationResult
    """
    if table is not None:
        return EmergencyClassifier(table=table).classify(text)
    return get_classifier().classify(text)
