"""
Call Duration Parser
Reads the free-text length agents type for manually logged calls
"""
import re
from typing import Any

# Tried in order, first match wins. Patterns are searched, not anchored,
# so "5 minutes" and "about 3m" still parse.
_MINUTES_RE = re.compile(r"(\d+)\s*(?:min|m)")
_CLOCK_RE = re.compile(r"(\d+):(\d+)")
_SECONDS_RE = re.compile(r"(\d+)\s*s")
_NUMBER_RE = re.compile(r"(\d+)")


def parse_duration(text: Any) -> float:
    """
    Parse a call length into minutes.

    Examples: "5m" -> 5, "5 min" -> 5, "5:30" -> 5.5, "120s" -> 2, "7" -> 7.
    Never raises; empty or unparseable input is 0.
    """
    if text is None:
        return 0
    value = str(text).strip().lower()
    if not value:
        return 0

    match = _MINUTES_RE.search(value)
    if match:
        return int(match.group(1))

    match = _CLOCK_RE.search(value)
    if match:
        return int(match.group(1)) + int(match.group(2)) / 60

    match = _SECONDS_RE.search(value)
    if match:
        return int(match.group(1)) / 60

    match = _NUMBER_RE.search(value)
    if match:
        return int(match.group(1))

    return 0
