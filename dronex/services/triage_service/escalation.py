"""Escalation policy: severity -> notification actions.

The decision only says WHAT should happen. Dialing, messaging contacts
and attaching the map link belong to the notification dispatcher that
consumes the escalation stream.
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from dronex.shared.models import Severity
from .classifier import ClassificationResult
from .config import DISPATCH_NUMBERS, UNIFIED_EMERGENCY_NUMBER


@dataclass(frozen=True)
class EscalationDecision:
    """Downstream actions triggered by one classification."""
    should_auto_call: bool = False
    should_notify_contacts: bool = False
    should_attach_location: bool = False

    @property
    def requires_action(self) -> bool:
        return self.should_auto_call or self.should_notify_contacts or self.should_attach_location

    def to_dict(self) -> Dict[str, Any]:
        return {
            "should_auto_call": self.should_auto_call,
            "should_notify_contacts": self.should_notify_contacts,
            "should_attach_location": self.should_attach_location,
        }


NO_ESCALATION = EscalationDecision()

ESCALATION_RULES: Mapping[Severity, EscalationDecision] = {
    Severity.CRITICAL: EscalationDecision(
        should_auto_call=True,
        should_notify_contacts=True,
        should_attach_location=True,
    ),
    Severity.HIGH: EscalationDecision(
        should_notify_contacts=True,
        should_attach_location=True,
    ),
    Severity.MEDIUM: EscalationDecision(
        should_notify_contacts=True,
    ),
    # LOW and NONE: informational response only
    Severity.LOW: NO_ESCALATION,
    Severity.NONE: NO_ESCALATION,
}


def decide_escalation(result: ClassificationResult) -> EscalationDecision:
    """Translate a classification into escalation flags.

    Pure and idempotent: the same result always yields an equal decision.
    """
    return ESCALATION_RULES.get(result.severity, NO_ESCALATION)


def dispatch_number_for(category: str) -> str:
    """Emergency number the dialer should use for a category."""
    return DISPATCH_NUMBERS.get(category, UNIFIED_EMERGENCY_NUMBER)
