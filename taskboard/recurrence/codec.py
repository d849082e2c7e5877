"""Serialize recurrence rules to and from their stored JSON form."""
import json
from typing import Optional

from pydantic import ValidationError

from taskboard.models.recurrence_rule import RecurrenceRule
from taskboard.utils.logger import get_logger

logger = get_logger("recurring-task-service")


def decode(raw: Optional[str]) -> Optional[RecurrenceRule]:
    """Parse a stored rule, returning None for missing or malformed payloads."""
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Recurrence rule is not valid JSON", error=str(e))
        return None
    if not isinstance(payload, dict):
        logger.warning("Recurrence rule is not a JSON object", payload_type=type(payload).__name__)
        return None
    try:
        return RecurrenceRule.model_validate(payload)
    except ValidationError as e:
        logger.warning("Recurrence rule failed validation", errors=e.error_count(), detail=str(e))
        return None


def encode(rule: RecurrenceRule) -> str:
    """Serialize a rule to its JSON transport string."""
    return rule.model_dump_json(by_alias=True, exclude_none=True)
