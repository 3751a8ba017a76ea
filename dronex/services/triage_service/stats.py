"""Aggregate statistics over a batch of classifications."""
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from .classifier import ClassificationResult


@dataclass(frozen=True)
class EmergencyStats:
    """Emergency counts for a chat history or evaluation batch."""
    total: int
    emergency_count: int
    by_category: Dict[str, int] = field(default_factory=dict)

    @property
    def emergency_rate(self) -> float:
        """Share of emergency results, in percent."""
        if self.total == 0:
            return 0.0
        return self.emergency_count / self.total * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "emergency_count": self.emergency_count,
            "by_category": dict(self.by_category),
            "emergency_rate": round(self.emergency_rate, 2),
        }


def summarize_classifications(results: Iterable[ClassificationResult]) -> EmergencyStats:
    """Count emergencies per category across results.

    Results classified as "general" count toward the total only.
    """
    total = 0
    by_category: Counter = Counter()
    for result in results:
        total += 1
        if result.is_emergency:
            by_category[result.category] += 1

    return EmergencyStats(
        total=total,
        emergency_count=sum(by_category.values()),
        by_category=dict(by_category),
    )
