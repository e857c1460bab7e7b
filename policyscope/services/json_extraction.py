"""Pull a JSON object out of free-form assistant text."""

import json
import re
from typing import Callable, Optional, Sequence

from policyscope.errors import ResponseFormatError
from policyscope.logger import get_logger

logger = get_logger(__name__)

Strategy = Callable[[str], Optional[dict]]

FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def _loads_object(candidate: str) -> Optional[dict]:
    try:
        value = json.loads(candidate)
    except (ValueError, TypeError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def parse_whole_text(text: str) -> Optional[dict]:
    """The reply is nothing but JSON."""
    return _loads_object(text.strip())


def parse_fenced_block(text: str) -> Optional[dict]:
    """The JSON sits inside a ``` or ```json fence."""
    for match in FENCED_BLOCK.finditer(text):
        result = _loads_object(match.group(1).strip())
        if result is not None:
            return result
    return None


def parse_outer_braces(text: str) -> Optional[dict]:
    """Everything from the first '{' to the last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _loads_object(text[start : end + 1])


EXTRACTION_STRATEGIES: tuple[Strategy, ...] = (
    parse_whole_text,
    parse_fenced_block,
    parse_outer_braces,
)


def extract_json(text: str, strategies: Sequence[Strategy] = EXTRACTION_STRATEGIES) -> dict:
    """Return the object found by the first strategy that succeeds.

    Raises:
        ResponseFormatError: If no strategy yields a JSON object.
    """
    for strategy in strategies:
        result = strategy(text)
        if result is not None:
            logger.debug(f"Extracted JSON with {getattr(strategy, '__name__', strategy)}")
            return result

    logger.error(f"No JSON object found in {len(text)} chars of assistant text")
    raise ResponseFormatError("AI response is not valid JSON and no JSON object could be extracted")
