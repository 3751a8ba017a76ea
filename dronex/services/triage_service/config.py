"""Triage Service configuration, severity thresholds and keyword weights.

All constants here are tunable. The only hard rules are the ones
SeverityThresholds enforces: bands are monotonic and do not overlap.
"""
from dataclasses import dataclass
from typing import Dict, Tuple

# Confidence is reported on a 0-10 scale
CONFIDENCE_CEILING = 10.0


@dataclass(frozen=True)
class SeverityThresholds:
    """Confidence bands (0-10 scale) mapping a score to a severity.

    Each bound is inclusive at the top:
    low (EMERGENCY_MIN, LOW_MAX], medium (LOW_MAX, MEDIUM_MAX],
    high (MEDIUM_MAX, HIGH_MAX], critical (HIGH_MAX, 10].
    """
    EMERGENCY_MIN: float = 0.5   # At or below: not an emergency
    LOW_MAX: float = 3.0
    MEDIUM_MAX: float = 5.0
    HIGH_MAX: float = 7.0

    def __post_init__(self):
        bounds = (self.EMERGENCY_MIN, self.LOW_MAX, self.MEDIUM_MAX, self.HIGH_MAX)
        if self.EMERGENCY_MIN < 0.0:
            raise ValueError(f"EMERGENCY_MIN must be >= 0, got {self.EMERGENCY_MIN}")
        if any(lower >= upper for lower, upper in zip(bounds, bounds[1:])):
            raise ValueError(f"Severity thresholds must be strictly increasing, got {bounds}")


@dataclass(frozen=True)
class ClassifierConfig:
    """Configuration for keyword classification."""

    # Weight-per-word is multiplied by this to land on the 0-10 scale
    confidence_scale: float = 10.0

    # Upper clamp for confidence
    max_confidence: float = 10.0

    # Version tracking for logs and emitted events
    keyword_table_version: str = "2025.06.01"

    def __post_init__(self):
        if not 0.0 < self.max_confidence <= CONFIDENCE_CEILING:
            raise ValueError(
                f"max_confidence must be in (0, {CONFIDENCE_CEILING}], got {self.max_confidence}"
            )
        if not self.confidence_scale > 0.0:
            raise ValueError(f"confidence_scale must be > 0, got {self.confidence_scale}")


# Category declaration order is the tie-break order: first declared wins.
# Weight 3 marks keywords that on their own signal immediate danger.
DEFAULT_KEYWORD_TABLE: Tuple[Tuple[str, Tuple[Tuple[str, float], ...]], ...] = (
    # ==========================================================================
    # DIRECT DISTRESS (caller is asking for help, no disaster named)
    # ==========================================================================
    ("distress", (
        ("help", 3),
        ("emergency", 3),
        ("urgent", 3),
        ("trapped", 3),
        ("rescue", 2),
        ("danger", 2),
        ("stranded", 2),
        ("call ambulance", 3),
        ("call police", 3),
        ("need assistance", 2),
        ("lost", 1),
        ("panic", 1),
        ("scared", 1),
    )),

    # ==========================================================================
    # MEDICAL
    # ==========================================================================
    ("medical", (
        ("heart attack", 3),
        ("unconscious", 3),
        ("not breathing", 3),
        ("stroke", 3),
        ("overdose", 3),
        ("seizure", 3),
        ("choking", 3),
        ("chest pain", 2),
        ("bleeding", 2),
        ("allergic reaction", 2),
        ("breathing problem", 2),
        ("poisoning", 2),
        ("pregnancy emergency", 2),
        ("broken bone", 2),
        ("injured", 2),
        ("accident", 1),
        ("diabetic", 1),
        ("burn", 1),
        ("pain", 1),
    )),

    # ==========================================================================
    # FIRE
    # ==========================================================================
    ("fire", (
        ("fire", 3),
        ("explosion", 3),
        ("gas leak", 3),
        ("smoke", 2),
        ("flames", 2),
        ("burning", 2),
        ("wildfire", 2),
        ("evacuation", 1),
        ("smoke alarm", 1),
    )),

    # ==========================================================================
    # EARTHQUAKE
    # ==========================================================================
    ("earthquake", (
        ("earthquake", 3),
        ("building collapse", 3),
        ("trapped", 2),
        ("aftershock", 2),
        ("tremor", 2),
        ("landslide", 2),
        ("seismic", 1),
        ("structural damage", 1),
        ("debris", 1),
    )),

    # ==========================================================================
    # FLOOD
    # ==========================================================================
    ("flood", (
        ("flood", 3),
        ("drowning", 3),
        ("tsunami", 3),
        ("dam break", 3),
        ("rising water", 2),
        ("storm surge", 2),
        ("river overflow", 2),
        ("water rescue", 2),
    )),

    # ==========================================================================
    # CYCLONE / SEVERE WEATHER
    # ==========================================================================
    ("cyclone", (
        ("cyclone", 3),
        ("hurricane", 3),
        ("tornado", 3),
        ("typhoon", 3),
        ("severe weather", 2),
        ("storm", 2),
        ("lightning", 1),
        ("power outage", 1),
        ("tree down", 1),
        ("roof damage", 1),
    )),

    # ==========================================================================
    # CRIME / PERSONAL SAFETY
    # ==========================================================================
    ("crime", (
        ("kidnapping", 3),
        ("assault", 3),
        ("domestic violence", 3),
        ("robbery", 2),
        ("break in", 2),
        ("violence", 2),
        ("stalking", 2),
        ("harassment", 2),
        ("threat", 1),
        ("theft", 1),
        ("suspicious person", 1),
    )),
)


# Number handed to the dialer when a decision says auto call.
# Categories without an entry use the unified emergency number.
UNIFIED_EMERGENCY_NUMBER = "112"

DISPATCH_NUMBERS: Dict[str, str] = {
    "crime": "100",
    "fire": "101",
    "medical": "108",
}
