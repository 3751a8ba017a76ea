"""Triage Service: emergency classification and escalation.

Every chat message and voice transcript passes through here. The
classifier scores the text against a weighted keyword table; the
escalation policy turns the resulting severity into notification actions.

Components:
- classifier.py: EmergencyClassifier (pure keyword scoring)
- escalation.py: Escalation policy and dispatch-number routing
- keyword_table.py: Immutable keyword table, loaded once per process
- config.py: Severity thresholds, default keywords, dispatch numbers
- intents.py: Quick-action command detection
- stats.py: Emergency statistics over classification batches
- guidance.py: Informational response content per category
- escalation_publisher.py: Kinesis event publishing
- handler.py: Flask HTTP endpoints (/health, /ready, /classify)

Usage:
    # As HTTP service
    POST /classify {"message": "...", "user_id": "...", "latitude": ..., "longitude": ...}

    # Direct import
    from dronex.services.triage_service import classify, decide_escalation
    result = classify("there's a fire in my building")
    decision = decide_escalation(result)
"""

from .classifier import (
    GENERAL_CATEGORY,
    ClassificationResult,
    EmergencyClassifier,
    classify,
)
from .config import ClassifierConfig, SeverityThresholds, DEFAULT_KEYWORD_TABLE
from .escalation import EscalationDecision, decide_escalation, dispatch_number_for
from .escalation_publisher import EscalationEvent, EscalationEventPublisher
from .guidance import Guidance, build_guidance
from .intents import QuickAction, detect_quick_action
from .keyword_table import KeywordTable, get_keyword_table, load_keyword_table
from .stats import EmergencyStats, summarize_classifications

__all__ = [
    "GENERAL_CATEGORY",
    "ClassificationResult",
    "EmergencyClassifier",
    "classify",
    "ClassifierConfig",
    "SeverityThresholds",
    "DEFAULT_KEYWORD_TABLE",
    "EscalationDecision",
    "decide_escalation",
    "dispatch_number_for",
    "EscalationEvent",
    "EscalationEventPublisher",
    "Guidance",
    "build_guidance",
    "QuickAction",
    "detect_quick_action",
    "KeywordTable",
    "get_keyword_table",
    "load_keyword_table",
    "EmergencyStats",
    "summarize_classifications",
]
