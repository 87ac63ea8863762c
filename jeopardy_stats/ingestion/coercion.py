"""Parse scraped dollar tokens like "$1,200" or "DD: $2,000" into integers."""

from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

# "D", ":" and spaces come from malformed Daily Double markup ("DD: $1,000").
_STRIP_PATTERN = re.compile(r"[$,D: ]")
_LEADING_INT = re.compile(r"[+-]?\d+")


def coerce_value(token: Any) -> int:
    if isinstance(token, bool) or token is None:
        return 0
    if isinstance(token, int):
        return token
    if isinstance(token, float):
        try:
            return int(token)
        except (ValueError, OverflowError):
            logger.debug("Non-finite value token=%r coerced to 0", token)
            return 0

    cleaned = _STRIP_PATTERN.sub("", str(token))
    match = _LEADING_INT.match(cleaned)
    if match is None:
        if cleaned:
            logger.debug("Unparseable value token=%r coerced to 0", token)
        return 0
    try:
        return int(match.group(0))
    except ValueError:
        # Digit runs past the interpreter's int-string conversion limit.
        logger.debug("Oversized value token coerced to 0 (%s chars)", len(match.group(0)))
        return 0


def coerce_clue_value(token: Any) -> int:
    value = coerce_value(token)
    if value < 0:
        logger.debug("Negative clue value token=%r coerced to 0", token)
        return 0
    return value
