"""Informational guidance returned alongside a classification.

The assistant always answers with something useful: immediate actions for
the recognised category and the emergency numbers. The client renders it.
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from dronex.shared.models import Severity
from .classifier import ClassificationResult
from .escalation import dispatch_number_for

EMERGENCY_CONTACTS: Tuple[Tuple[str, str], ...] = (
    ("All Emergency", "112"),
    ("Police", "100"),
    ("Fire Department", "101"),
    ("Medical Emergency", "108"),
)

CATEGORY_GUIDANCE: Mapping[str, Tuple[str, ...]] = {
    "distress": (
        "Stay where responders can reach you and keep your phone charged",
        "Share your location with emergency contacts",
        "Describe your surroundings: landmarks, floor, street signs",
    ),
    "medical": (
        "Call 108 for an ambulance",
        "Keep the person still and check breathing",
        "Apply firm pressure to any bleeding",
        "Do not give food or water to an unconscious person",
    ),
    "fire": (
        "Leave the building by the stairs, never the lift",
        "Stay low under smoke and cover your nose and mouth",
        "Feel doors before opening; do not open a hot door",
        "Call 101 once you are outside",
    ),
    "earthquake": (
        "Drop, cover and hold on until the shaking stops",
        "Stay away from windows and heavy furniture",
        "If trapped, tap on pipes or walls so rescuers can hear you",
        "Expect aftershocks before moving outside",
    ),
    "flood": (
        "Move to higher ground immediately",
        "Do not walk or drive through moving water",
        "Switch off electricity at the mains if it is safe to do so",
    ),
    "cyclone": (
        "Shelter in an interior room away from windows",
        "Unplug appliances and keep a torch ready",
        "Stay indoors until authorities give the all-clear",
    ),
    "crime": (
        "Move to a safe, well-lit public place",
        "Do not confront the person",
        "Call 100 and share your location with trusted contacts",
    ),
}

GENERAL_GUIDANCE: Tuple[str, ...] = (
    "Describe your situation and I will suggest immediate actions",
    "Say \"share my location\" to send your GPS position to your contacts",
    "Call 112 right away if you are in danger",
)


@dataclass(frozen=True)
class Guidance:
    """Response content for one classified utterance."""
    headline: str
    actions: Tuple[str, ...]
    dispatch_number: str
    contacts: Tuple[Tuple[str, str], ...] = EMERGENCY_CONTACTS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headline": self.headline,
            "actions": list(self.actions),
            "dispatch_number": self.dispatch_number,
            "contacts": [{"name": name, "phone": phone} for name, phone in self.contacts],
        }


def headline_for(result: ClassificationResult) -> str:
    """Banner text; urgency follows the classification's severity."""
    if not result.is_emergency:
        return "DroneX Emergency Assistant Ready"
    if result.severity == Severity.LOW:
        return f"Possible {result.category} situation"
    return f"{result.severity.value.upper()} {result.category.upper()} EMERGENCY DETECTED"


def build_guidance(
    result: ClassificationResult,
    guidance: Optional[Mapping[str, Tuple[str, ...]]] = None,
) -> Guidance:
    """Pick actions for the classified category.

    Categories without their own entry (including "general") get the
    general assistant actions.
    """
    table = CATEGORY_GUIDANCE if guidance is None else guidance
    actions = table.get(result.category, GENERAL_GUIDANCE) if result.is_emergency else GENERAL_GUIDANCE
    return Guidance(
        headline=headline_for(result),
        actions=actions,
        dispatch_number=dispatch_number_for(result.category),
    )
