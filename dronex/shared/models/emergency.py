"""Emergency domain models.

Severity is the ordinal urgency assigned to one utterance. Utterance and
GeoPoint are the inputs the app hands to the triage service.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Severity(Enum):
    """Ordinal urgency level of an utterance.

    NONE means no emergency was recognised; the rest drive escalation.
    """
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Position in the urgency order, NONE == 0."""
        return _SEVERITY_RANK[self]

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank


_SEVERITY_RANK = {severity: rank for rank, severity in enumerate(Severity)}


@dataclass(frozen=True)
class GeoPoint:
    """WGS84 coordinate pair attached to an utterance."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude must be -90..90, got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude must be -180..180, got {self.longitude}")

    @property
    def maps_link(self) -> str:
        return f"https://maps.google.com/?q={self.latitude},{self.longitude}"


@dataclass(frozen=True)
class Utterance:
    """One unit of user input: typed chat message or voice transcript.

    The location and image reference ride along for the notification
    dispatcher; classification only reads the text.
    """
    text: str = ""
    location: Optional[GeoPoint] = None
    image_ref: Optional[str] = None

    def __post_init__(self):
        # None (a missing transcript) is treated as empty input
        if self.text is None:
            object.__setattr__(self, "text", "")
