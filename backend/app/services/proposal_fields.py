"""Conversions between proposal form values and flat store fields."""
import json
import logging
import re
from typing import Any, Optional

from app.schemas.submission import IntegrationScores, Reference

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_cost(value: Any) -> float:
    """Lenient money parse: "$12,500" -> 12500.0; empty or unparseable -> 0.

    Every character that is not a digit or a decimal point is dropped first,
    so "1k" becomes 1.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def format_cost(value: Any) -> str:
    if value in (None, "", 0, 0.0):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_blob(value: Any) -> str:
    if hasattr(value, "model_dump"):
        value = value.model_dump(by_alias=True)
    return json.dumps(value)


def decode_blob(raw: Any, field_name: str = "") -> Optional[dict[str, Any]]:
    """Parse a JSON text field into a dict. Legacy rows may be double-encoded: a string result is parsed again."""
    if isinstance(raw, dict):
        return raw
    if not raw or not isinstance(raw, str):
        return None
    try:
        value = json.loads(raw)
        if isinstance(value, str):
            value = json.loads(value)
    except json.JSONDecodeError:
        logger.warning("malformed %s blob; using defaults", field_name or "serialized")
        return None
    return value if isinstance(value, dict) else None


def decode_integration_scores(raw: Any) -> IntegrationScores:
    parsed = decode_blob(raw, "Integration Scores")
    if not parsed:
        return IntegrationScores()
    try:
        return IntegrationScores.model_validate(parsed)
    except ValueError:
        logger.warning("integration scores did not match the expected shape; using defaults")
        return IntegrationScores()


def decode_reference(raw: Any, field_name: str = "Reference") -> Reference:
    parsed = decode_blob(raw, field_name)
    if not parsed:
        return Reference()
    try:
        return Reference.model_validate(parsed)
    except ValueError:
        logger.warning("%s did not match the expected shape; using defaults", field_name)
        return Reference()
