import json
import re
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

_TAGGED_JSON = re.compile(r"<json>([\s\S]*?)</json>")


def extract_json(response: str) -> Optional[Any]:
    """Parse JSON wrapped in <json>...</json> tags. Returns None if absent or invalid."""
    match = _TAGGED_JSON.search(response or "")
    if not match:
        return None

    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse tagged JSON: {e}")
        return None


def extract_json_with_fallback(response: str) -> Optional[Any]:
    """Extract JSON from a completion.

    Tries <json> tags first, then the outermost {...} object or [...] array,
    whichever opens first.
    """
    if not response:
        return None

    result = extract_json(response)
    if result is not None:
        return result

    pairs = sorted(
        ((response.find(opener), opener, closer) for opener, closer in (("{", "}"), ("[", "]"))),
        key=lambda p: p[0] if p[0] != -1 else len(response),
    )
    for start, opener, closer in pairs:
        end = response.rfind(closer) + 1
        if start != -1 and end > start:
            try:
                return json.loads(response[start:end])
            except json.JSONDecodeError:
                logger.debug(f"No valid JSON between '{opener}' and '{closer}'")

    logger.warning("No JSON object or array found in response")
    return None
