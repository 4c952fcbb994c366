"""
Stage Domain Models
Pipeline stage ids and transition results managed by the engine
"""
import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


NEW_STAGE_ID = 0
CREATED_STAGE_ID = 10
PRECOMMUNICATION_STAGE_ID = 11
COMMUNICATION_STARTED_STAGE_ID = 15

# Stages each transition may start from
PRECOMMUNICATION_ENTRY_STAGES = frozenset({NEW_STAGE_ID, CREATED_STAGE_ID})
COMMUNICATION_STARTED_ENTRY_STAGES = frozenset(
    {NEW_STAGE_ID, CREATED_STAGE_ID, PRECOMMUNICATION_STAGE_ID}
)

DEFAULT_DELAY_MS = 1000

# Leading integer of a text stage: "11", " 10.0", "15 - started"
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class TriggerKind(str, Enum):
    """Interaction kinds that trigger a stage evaluation"""
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    MANUAL = "manual"
    CALL = "call"


DEFAULT_TRIGGER_DELAYS_MS = {
    TriggerKind.EMAIL: 1500,     # saved by the mail sync backend
    TriggerKind.WHATSAPP: 1000,
    TriggerKind.MANUAL: 500,     # written directly on the lead row
    TriggerKind.CALL: 1000,
}


class TransitionResult(BaseModel):
    """Outcome of one stage evaluation"""
    updated: bool
    new_stage: Optional[int] = None

    @classmethod
    def failed(cls) -> "TransitionResult":
        return cls(updated=False, new_stage=None)


def coerce_stage(value: Any) -> Optional[int]:
    """
    Convert a persisted stage column value to an int.

    The column is numeric on one schema and text on the other. Text is read
    up to its first non-digit, so "10.0" is 10. Returns None for null or
    blank, raises ValueError when no leading integer is present.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid stage value: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    match = _LEADING_INT.match(text)
    if not match:
        raise ValueError(f"Invalid stage value: {value!r}")
    return int(match.group(1))
