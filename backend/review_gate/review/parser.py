"""Extract and validate the JSON review payload from raw model output.

Models do not always honour "JSON only".  The payload is looked for in this
order:

1. the whole response parsed as a JSON object;
2. a fenced block (```` ``` ```` or ```` ```json ````) whose interior is a JSON object;
3. the outermost JSON object that ends at the very end of the response.

The extracted object is then validated against ``ReviewResult``.  Any
failure yields ``None``; a partially-typed payload is never returned.
"""
import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from .schemas import ReviewResult

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)
_DECODER = json.JSONDecoder()


def _as_object(text: str) -> Optional[dict]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _trailing_object(text: str) -> Optional[dict]:
    """Return the outermost JSON object that ends at the end of *text*."""
    end = len(text)
    start = text.find("{")
    while start != -1:
        try:
            data, stop = _DECODER.raw_decode(text, start)
        except ValueError:
            pass
        else:
            if stop == end and isinstance(data, dict):
                return data
        start = text.find("{", start + 1)
    return None


def extract_json_payload(text: str) -> Optional[dict]:
    """Find the JSON object in a model response, or None."""
    if not text:
        return None
    text = text.strip()

    data = _as_object(text)
    if data is not None:
        return data

    for match in _FENCE.finditer(text):
        data = _as_object(match.group(1).strip())
        if data is not None:
            return data

    return _trailing_object(text)


def parse_review(text: str) -> Optional[ReviewResult]:
    """Decode *text* into a ReviewResult, or None if it is unparseable."""
    payload = extract_json_payload(text)
    if payload is None:
        logger.warning("[ReviewParser] No JSON object found in model response (%d chars)", len(text or ""))
        return None

    try:
        return ReviewResult.model_validate(payload)
    except ValidationError as exc:
        logger.warning("[ReviewParser] Review payload failed schema validation: %s", exc)
        return None
