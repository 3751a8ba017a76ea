"""Quick-action detection for voice and typed commands.

Some utterances are app commands rather than emergencies ("find the
nearest hospital", "share my location"). Each action needs both of its
trigger words somewhere in the text; the first rule that matches wins.
"""
from enum import Enum
from typing import Optional, Tuple


class QuickAction(Enum):
    """App actions a command can trigger directly."""
    FIND_HOSPITALS = "find_hospitals"
    FIND_RESTAURANTS = "find_restaurants"
    FIND_POLICE = "find_police"
    SHOW_EMERGENCY_CONTACTS = "show_emergency_contacts"
    CALL_EMERGENCY = "call_emergency"
    SHARE_LOCATION = "share_location"
    ALERT_CONTACTS = "alert_contacts"


# Order matters: "call emergency contact" shows contacts, it doesn't dial
QUICK_ACTION_RULES: Tuple[Tuple[Tuple[str, str], QuickAction], ...] = (
    (("find", "hospital"), QuickAction.FIND_HOSPITALS),
    (("find", "restaurant"), QuickAction.FIND_RESTAURANTS),
    (("find", "police"), QuickAction.FIND_POLICE),
    (("emergency", "contact"), QuickAction.SHOW_EMERGENCY_CONTACTS),
    (("call", "emergency"), QuickAction.CALL_EMERGENCY),
    (("share", "location"), QuickAction.SHARE_LOCATION),
    (("contact", "help"), QuickAction.ALERT_CONTACTS),
)


def detect_quick_action(text: Optional[str]) -> Optional[QuickAction]:
    """Return the quick action a command asks for, or None."""
    lowered = (text or "").lower()
    for words, action in QUICK_ACTION_RULES:
        if all(word in lowered for word in words):
            return action
    return None
