"""Dapr client for announcing generated task instances."""
import json
import uuid
from typing import Any, Dict, Optional

from dapr.clients import DaprClient

from taskboard.config import Settings, get_settings, utc_now
from taskboard.utils.logger import get_logger

logger = get_logger("recurring-task-service")


class DaprEventPublisher:
    """Publishes task events to a Dapr pub/sub topic."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def publish_event(self, event_type: str, data: Dict[str, Any], source: str = "recurring-task-service"):
        """Publish an event envelope, or only log it when publishing is disabled."""
        topic = self.settings.dapr_topic
        if not self.settings.publish_events:
            # Development mode: log the event instead of publishing
            logger.info("Event not published (PUBLISH_EVENTS disabled)", topic=topic, type=event_type, data=data)
            return {"success": True, "message": "Event logged in dev mode"}

        event_envelope = {
            "event_id": str(uuid.uuid4()),
            "type": event_type,
            "timestamp": utc_now().isoformat(),
            "source": source,
            "data": data,
        }

        try:
            with DaprClient() as client:
                client.publish_event(
                    pubsub_name=self.settings.dapr_pubsub_name,
                    topic_name=topic,
                    data=json.dumps(event_envelope, default=str),
                    data_content_type="application/json",
                )
        except Exception as e:
            logger.error("Failed to publish event", topic=topic, type=event_type, error=str(e))
            raise

        logger.info("Published event", topic=topic, type=event_type, event_id=event_envelope["event_id"])
        return {"success": True, "event_id": event_envelope["event_id"]}

    def publish_task_created(self, task_data: Dict[str, Any]):
        """Publish task.created event for a generated instance."""
        return self.publish_event("task.created", task_data)


# Global instance
dapr_publisher = DaprEventPublisher()
