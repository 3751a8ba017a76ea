"""Triage Service HTTP handler.

Every chat message and voice transcript from the app is posted to
/classify. The response tells the client which category and severity
were recognised and which escalation actions to take; escalations that
notify contacts are also published to Kinesis for the dispatcher.

User identifiers are hashed before logging (hash_identifier()).
"""
import logging
import os
import uuid
from typing import Optional

from flask import Flask, jsonify, request

from dronex.shared.models import GeoPoint, Severity, Utterance
from dronex.shared.utils import configure_hash_salt, fingerprint_text, hash_identifier
from .classifier import ClassificationResult, EmergencyClassifier
from .config import ClassifierConfig, SeverityThresholds
from .escalation import EscalationDecision, decide_escalation, dispatch_number_for
from .escalation_publisher import EscalationEvent, EscalationEventPublisher
from .guidance import build_guidance
from .intents import detect_quick_action
from .keyword_table import get_keyword_table

logger = logging.getLogger(__name__)

app = Flask(__name__)

configure_hash_salt(os.getenv("HASH_SALT", "default_dev_salt_change_in_production_32chars"))

config = ClassifierConfig(
    keyword_table_version=os.getenv("KEYWORD_TABLE_VERSION", "2025.06.01"),
)
classifier = EmergencyClassifier(
    table=get_keyword_table(),
    thresholds=SeverityThresholds(),
    config=config,
)

escalation_publisher = EscalationEventPublisher(
    stream_name=os.getenv("KINESIS_STREAM_NAME", "dronex-escalation-events"),
    enabled=os.getenv("ESCALATION_PUBLISHING_ENABLED", "true").lower() == "true",
)


class InvalidRequest(ValueError):
    """Client sent a body the endpoint cannot use."""


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint for the load balancer."""
    return jsonify({
        "status": "healthy",
        "service": "triage-service",
        "keyword_table_version": config.keyword_table_version,
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check - verifies the classifier is built.

    Returns:
        200 if ready, 503 if not
    """
    if classifier is None:
        return jsonify({"status": "not_ready", "reason": "classifier_not_initialized"}), 503
    return jsonify({"status": "ready"}), 200


@app.route("/classify", methods=["POST"])
def classify_message():
    """Classify a message and decide its escalation.

    Request Body:
        {
            "message": "There's a fire in my building",
            "message_id": "msg_123" (optional),
            "user_id": "user_456" (optional),
            "latitude": 28.61, "longitude": 77.20 (optional, both or neither),
            "image_ref": "emergency-images/emergency_1718.jpg" (optional)
        }

    Response:
        {
            "message_id": "msg_123",
            "category": "fire",
            "severity": "medium",
            "confidence": 5.0,
            "matched_keywords": ["fire"],
            "is_emergency": true,
            "escalation": {"should_auto_call": false, ...},
            "dispatch_number": "101",
            "quick_action": null,
            "guidance": {"headline": "MEDIUM FIRE EMERGENCY DETECTED", ...},
            "escalation_published": true
        }

    Error Handling:
        Bad request bodies get a 400. Any other error returns a MEDIUM
        fallback that notifies contacts - a broken classifier must not
        silence a real emergency.
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        logger.warning("CLASSIFY_REQUEST_INVALID", extra={"reason": "empty_body"})
        return jsonify({"error": "Request body required"}), 400

    try:
        utterance = _parse_utterance(data)
    except InvalidRequest as e:
        logger.warning("CLASSIFY_REQUEST_INVALID", extra={"reason": str(e)})
        return jsonify({"error": str(e)}), 400

    message_id = data.get("message_id") or f"msg_{uuid.uuid4().hex[:12]}"

    try:
        user_id_hash = hash_identifier(str(data.get("user_id", "anonymous")))

        logger.info(
            "CLASSIFY_REQUESTED",
            extra={
                "message_id": message_id,
                "user_id_hash": user_id_hash,
                "text_hash": fingerprint_text(utterance.text),
                "message_length": len(utterance.text),
                "has_location": utterance.location is not None,
                "has_image": utterance.image_ref is not None,
            }
        )

        result = classifier.classify(utterance.text)
        decision = decide_escalation(result)
        quick_action = detect_quick_action(utterance.text)

        published = False
        if decision.should_notify_contacts:
            published = _handle_escalation(
                message_id=message_id,
                user_id_hash=user_id_hash,
                result=result,
                decision=decision,
                location=utterance.location,
            )

        logger.info(
            "CLASSIFY_COMPLETED",
            extra={
                "message_id": message_id,
                "user_id_hash": user_id_hash,
                "category": result.category,
                "severity": result.severity.value,
                "confidence": result.confidence,
                "quick_action": quick_action.value if quick_action else None,
                "escalation_published": published,
            }
        )

        response = {"message_id": message_id}
        response.update(result.to_dict())
        response.update({
            "escalation": decision.to_dict(),
            "dispatch_number": dispatch_number_for(result.category),
            "quick_action": quick_action.value if quick_action else None,
            "guidance": build_guidance(result).to_dict(),
            "escalation_published": published,
            "keyword_table_version": config.keyword_table_version,
        })
        return jsonify(response), 200

    except Exception as e:
        logger.error(
            "CLASSIFY_ERROR",
            extra={
                "message_id": message_id,
                "error": str(e),
                "error_type": type(e).__name__,
                "action": "DEFAULTING_TO_MEDIUM",
            }
        )
        return jsonify({
            "message_id": message_id,
            "category": "general",
            "severity": Severity.MEDIUM.value,
            "confidence": 0.0,
            "matched_keywords": [],
            "is_emergency": False,
            "escalation": EscalationDecision(should_notify_contacts=True).to_dict(),
            "dispatch_number": dispatch_number_for("general"),
            "quick_action": None,
            "escalation_published": False,
            "error": "Classifier error - defaulting to medium",
            "keyword_table_version": config.keyword_table_version,
        }), 200  # 200 so the client still shows the escalation options


def _parse_utterance(data: dict) -> Utterance:
    """Build an Utterance from a request body.

    Raises:
        InvalidRequest: On missing message or malformed coordinates
    """
    message = data.get("message")
    if message is None:
        raise InvalidRequest("Missing required field: message")
    if not isinstance(message, str):
        raise InvalidRequest("Field 'message' must be a string")

    latitude = data.get("latitude")
    longitude = data.get("longitude")
    location: Optional[GeoPoint] = None
    if latitude is not None or longitude is not None:
        if latitude is None or longitude is None:
            raise InvalidRequest("latitude and longitude must be sent together")
        if isinstance(latitude, bool) or isinstance(longitude, bool):
            raise InvalidRequest("latitude and longitude must be numbers")
        try:
            location = GeoPoint(latitude=float(latitude), longitude=float(longitude))
        except (TypeError, ValueError) as e:
            raise InvalidRequest(f"Invalid coordinates: {e}") from e

    image_ref = data.get("image_ref")
    if image_ref is not None and not isinstance(image_ref, str):
        raise InvalidRequest("Field 'image_ref' must be a string")

    return Utterance(text=message, location=location, image_ref=image_ref)


def _handle_escalation(
    message_id: str,
    user_id_hash: str,
    result: ClassificationResult,
    decision: EscalationDecision,
    location: Optional[GeoPoint],
) -> bool:
    """Log the escalation and publish it for the notification dispatcher.

    Args:
        message_id: Message identifier
        user_id_hash: Hashed user identifier
        result: Classification that triggered the escalation
        decision: Escalation flags
        location: Location sent with the message, if any

    Returns:
        True if the event reached Kinesis
    """
    log = logger.critical if result.severity == Severity.CRITICAL else logger.warning
    log(
        "EMERGENCY_ESCALATION",
        extra={
            "message_id": message_id,
            "user_id_hash": user_id_hash,
            "category": result.category,
            "severity": result.severity.value,
            "auto_call": decision.should_auto_call,
            "attach_location": decision.should_attach_location,
            "location_available": location is not None,
            "action": "PUBLISHING_TO_KINESIS",
        }
    )

    event = EscalationEvent.from_decision(
        message_id=message_id,
        user_id_hash=user_id_hash,
        result=result,
        decision=decision,
        location=location,
        keyword_table_version=config.keyword_table_version,
    )
    published = escalation_publisher.publish_escalation(event)

    if not published:
        logger.error(
            "ESCALATION_PUBLISH_FAILED",
            extra={
                "message_id": message_id,
                "event_id": event.event_id,
                "action": "MANUAL_REVIEW_REQUIRED",
            }
        )
    return published


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    port = int(os.getenv("PORT", "8002"))
    app.run(host="0.0.0.0", port=port, debug=False)
