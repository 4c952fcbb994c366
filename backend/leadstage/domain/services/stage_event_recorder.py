"""
Stage Event Recorder
Structured record of what the stage engine decided and what went wrong
"""
import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 500


class StageEventType(Enum):
    """Everything the engine reports, errors and decisions alike."""
    MISSING_IDENTIFIER = "missing_identifier"
    SOURCE_QUERY_FAILED = "source_query_failed"
    STAGE_FETCH_FAILED = "stage_fetch_failed"
    STAGE_UPDATE_FAILED = "stage_update_failed"
    EVALUATION_FAILED = "evaluation_failed"
    TRIGGER_FAILED = "trigger_failed"
    STAGE_UPDATED = "stage_updated"
    NO_TRANSITION = "no_transition"


_LOG_LEVELS = {
    StageEventType.MISSING_IDENTIFIER: logging.WARNING,
    StageEventType.SOURCE_QUERY_FAILED: logging.WARNING,
    StageEventType.STAGE_FETCH_FAILED: logging.ERROR,
    StageEventType.STAGE_UPDATE_FAILED: logging.ERROR,
    StageEventType.EVALUATION_FAILED: logging.ERROR,
    StageEventType.TRIGGER_FAILED: logging.ERROR,
    StageEventType.STAGE_UPDATED: logging.INFO,
    StageEventType.NO_TRANSITION: logging.DEBUG,
}


@dataclass
class StageEvent:
    """A single engine event."""
    event_type: StageEventType
    lead: Optional[str] = None
    detail: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return _LOG_LEVELS[self.event_type] >= logging.WARNING

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/API response."""
        return {
            "event_type": self.event_type.value,
            "lead": self.lead,
            "detail": self.detail,
            "is_error": self.is_error,
            "occurred_at": self.occurred_at.isoformat(),
        }


class StageEventRecorder:
    """
    Keeps a bounded history of engine events and logs each one.

    Usage:
        recorder = StageEventRecorder()
        recorder.record(StageEventType.STAGE_UPDATED, lead, from_stage=10, to_stage=11)
        recorder.count(StageEventType.SOURCE_QUERY_FAILED)
    """

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE):
        self._events: Deque[StageEvent] = deque(maxlen=history_size)
        self._counts: Counter = Counter()

    def record(
        self,
        event_type: StageEventType,
        lead: Optional[Any] = None,
        **detail: Any
    ) -> StageEvent:
        """
        Record an event and emit it to the log.

        Args:
            event_type: What happened
            lead: LeadRef (or any printable id) the event concerns
            **detail: Structured fields attached to the event
        """
        event = StageEvent(
            event_type=event_type,
            lead=str(lead) if lead is not None else None,
            detail=detail,
        )
        self._events.append(event)
        self._counts[event_type] += 1

        logger.log(
            _LOG_LEVELS[event_type],
            f"[stage-engine] {event_type.value} lead={event.lead} {detail}",
            extra={"stage_event": event_type.value, "lead": event.lead, "detail": detail}
        )
        return event

    def recent(self, limit: Optional[int] = None) -> List[StageEvent]:
        """Most recent events, newest last."""
        events = list(self._events)
        if limit is not None:
            return events[-limit:] if limit > 0 else []
        return events

    def events_for(self, lead: Any) -> List[StageEvent]:
        """Events recorded for one lead."""
        key = str(lead)
        return [event for event in self._events if event.lead == key]

    def count(self, event_type: StageEventType) -> int:
        """Total events of a type since start (not bounded by history size)."""
        return self._counts[event_type]

    def reset(self) -> None:
        """Clear history and counters (for testing)."""
        self._events.clear()
        self._counts.clear()


# Global instance
_stage_event_recorder: Optional[StageEventRecorder] = None


def get_stage_event_recorder() -> StageEventRecorder:
    """Get or create the global stage event recorder."""
    global _stage_event_recorder
    if _stage_event_recorder is None:
        from leadstage.core.config import get_settings
        _stage_event_recorder = StageEventRecorder(get_settings().event_history_size)
    return _stage_event_recorder
