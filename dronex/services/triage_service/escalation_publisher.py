"""Escalation event publisher for the Triage Service.

Publishes escalation decisions to a Kinesis stream. The notification
dispatcher consumes the stream and does the dialing, SMS and email fan-out,
so a slow or failing SMS gateway never holds up a triage response.
"""
import json
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from dronex.shared.models import GeoPoint
from .classifier import ClassificationResult
from .escalation import EscalationDecision, dispatch_number_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EscalationEvent:
    """Immutable escalation event, one per escalated utterance."""
    event_id: str
    event_type: str = "triage.escalation.decided"
    message_id: str = ""
    user_id_hash: str = ""
    category: str = "general"
    severity: str = "none"
    confidence: float = 0.0
    matched_keywords: List[str] = field(default_factory=list)
    should_auto_call: bool = False
    should_notify_contacts: bool = False
    should_attach_location: bool = False
    dispatch_number: str = ""
    location: Optional[GeoPoint] = None
    keyword_table_version: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_decision(
        cls,
        message_id: str,
        user_id_hash: str,
        result: ClassificationResult,
        decision: EscalationDecision,
        location: Optional[GeoPoint] = None,
        keyword_table_version: str = "",
    ) -> "EscalationEvent":
        """Build an event, keeping the location only when the decision asks for it."""
        return cls(
            event_id=f"evt_{uuid.uuid4().hex[:12]}",
            message_id=message_id,
            user_id_hash=user_id_hash,
            category=result.category,
            severity=result.severity.value,
            confidence=result.confidence,
            matched_keywords=sorted(result.matched_keywords),
            should_auto_call=decision.should_auto_call,
            should_notify_contacts=decision.should_notify_contacts,
            should_attach_location=decision.should_attach_location,
            dispatch_number=dispatch_number_for(result.category),
            location=location if decision.should_attach_location else None,
            keyword_table_version=keyword_table_version,
        )

    def to_kinesis_payload(self) -> dict:
        """Convert to Kinesis record payload.

        Returns:
            Dictionary for Kinesis put_record Data field
        """
        data = {
            "message_id": self.message_id,
            "user_id_hash": self.user_id_hash,
            "category": self.category,
            "severity": self.severity,
            "confidence": round(self.confidence, 3),
            "matched_keywords": self.matched_keywords,
            "should_auto_call": self.should_auto_call,
            "should_notify_contacts": self.should_notify_contacts,
            "should_attach_location": self.should_attach_location,
            "dispatch_number": self.dispatch_number,
            "keyword_table_version": self.keyword_table_version,
        }
        if self.location is not None:
            data["location"] = {
                "latitude": self.location.latitude,
                "longitude": self.location.longitude,
                "maps_link": self.location.maps_link,
            }
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat() + "Z",
            "source": "triage-service",
            "data": data,
        }


class EscalationEventPublisher:
    """Publishes escalation events to a Kinesis stream.

    Failure Handling:
        - Publishing failure does NOT fail the triage response
        - Failures are logged at CRITICAL level with the full payload
          so the notification can be replayed by hand
    """

    def __init__(
        self,
        stream_name: str = "dronex-escalation-events",
        enabled: bool = True,
        region: Optional[str] = None,
    ):
        """Initialize publisher.

        Args:
            stream_name: Kinesis stream name
            enabled: Whether publishing is enabled (disable for local dev)
            region: AWS region (defaults to AWS_REGION env var)
        """
        self.stream_name = stream_name
        self.enabled = enabled
        self.region = region or os.getenv("AWS_REGION", "ap-south-1")
        self._kinesis_client = None

        logger.info(
            "ESCALATION_PUBLISHER_INITIALIZED",
            extra={
                "stream_name": stream_name,
                "enabled": enabled,
                "region": self.region,
            }
        )

    @property
    def kinesis_client(self):
        """Lazy initialization of Kinesis client."""
        if self._kinesis_client is None and self.enabled:
            try:
                import boto3
                self._kinesis_client = boto3.client(
                    "kinesis",
                    region_name=self.region,
                )
            except Exception as e:
                logger.error(
                    "KINESIS_CLIENT_INIT_FAILED",
                    extra={"error": str(e)}
                )
        return self._kinesis_client

    def publish_escalation(self, event: EscalationEvent) -> bool:
        """Publish one escalation event.

        Args:
            event: Event built from a classification and its decision

        Returns:
            True if Kinesis accepted the record, False otherwise. Never raises.
        """
        if not self.enabled:
            logger.info(
                "ESCALATION_PUBLISH_SKIPPED",
                extra={
                    "event_id": event.event_id,
                    "message_id": event.message_id,
                    "reason": "publishing_disabled",
                }
            )
            return False

        payload = event.to_kinesis_payload()

        try:
            if self.kinesis_client is None:
                logger.critical(
                    "ESCALATION_EVENT_FALLBACK_LOG",
                    extra={
                        "event_id": event.event_id,
                        "payload": json.dumps(payload),
                        "reason": "kinesis_client_unavailable",
                        "action": "MANUAL_PROCESSING_REQUIRED",
                    }
                )
                return False

            response = self.kinesis_client.put_record(
                StreamName=self.stream_name,
                Data=json.dumps(payload),
                PartitionKey=event.user_id_hash or event.event_id,  # Same user -> same shard
            )

            logger.info(
                "ESCALATION_EVENT_PUBLISHED",
                extra={
                    "event_id": event.event_id,
                    "message_id": event.message_id,
                    "user_id_hash": event.user_id_hash,
                    "severity": event.severity,
                    "shard_id": response.get("ShardId"),
                    "sequence_number": response.get("SequenceNumber"),
                }
            )
            return True

        except Exception as e:
            logger.critical(
                "ESCALATION_EVENT_PUBLISH_FAILED",
                extra={
                    "event_id": event.event_id,
                    "message_id": event.message_id,
                    "user_id_hash": event.user_id_hash,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "MANUAL_REVIEW_REQUIRED",
                    "payload": json.dumps(payload),
                }
            )
            return False

    def publish_batch(self, events: List[EscalationEvent]) -> int:
        """Publish multiple escalation events in one call.

        Args:
            events: Events to publish

        Returns:
            Number of records Kinesis accepted
        """
        if not self.enabled or not events:
            return 0

        if self.kinesis_client is None:
            logger.error(
                "ESCALATION_BATCH_PUBLISH_FAILED",
                extra={"reason": "kinesis_client_unavailable"}
            )
            return 0

        records = [
            {
                "Data": json.dumps(event.to_kinesis_payload()),
                "PartitionKey": event.user_id_hash or event.event_id,
            }
            for event in events
        ]

        try:
            response = self.kinesis_client.put_records(
                StreamName=self.stream_name,
                Records=records,
            )

            failed_count = response.get("FailedRecordCount", 0)
            success_count = len(events) - failed_count

            logger.info(
                "ESCALATION_BATCH_PUBLISHED",
                extra={
                    "total": len(events),
                    "success": success_count,
                    "failed": failed_count,
                }
            )
            return success_count

        except Exception as e:
            logger.critical(
                "ESCALATION_BATCH_PUBLISH_FAILED",
                extra={
                    "error": str(e),
                    "event_count": len(events),
                }
            )
            return 0
