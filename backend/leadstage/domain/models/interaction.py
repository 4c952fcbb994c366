"""
Interaction Domain Models
Records read from the email, WhatsApp, call and manual interaction stores
"""
from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict

from leadstage.domain.services.duration_parser import parse_duration


# A call longer than this marks the conversation as started
CALL_THRESHOLD_MINUTES = 2
CALL_THRESHOLD_SECONDS = CALL_THRESHOLD_MINUTES * 60

MANUAL_CALL_KINDS = frozenset({"call", "phone"})
LEGACY_CALL_KIND = "c"


class Direction(str, Enum):
    """Who initiated the contact"""
    OUTBOUND = "outbound"  # firm -> client
    INBOUND = "inbound"    # client -> firm


class SourceKind(str, Enum):
    """Interaction stores the aggregator reads from"""
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    LEGACY_INTERACTION = "legacy_interaction"
    CALL_LOG = "call_log"
    MANUAL_INTERACTION = "manual_interaction"


class InteractionRecord(BaseModel):
    """
    Base for rows owned by external stores; unknown columns are ignored.

    Each source supplies its own direction vocabulary.
    """
    model_config = ConfigDict(extra="ignore")

    direction: Optional[str] = None

    @abstractmethod
    def normalized_direction(self) -> Optional[Direction]:
        ...

    def is_call_over_threshold(self) -> bool:
        return False


class EmailRecord(InteractionRecord):
    """emails row: direction is 'outgoing' / 'incoming'"""

    def normalized_direction(self) -> Optional[Direction]:
        if self.direction == "outgoing":
            return Direction.OUTBOUND
        if self.direction == "incoming":
            return Direction.INBOUND
        return None


class WhatsAppRecord(InteractionRecord):
    """whatsapp_messages row: direction is 'out' / 'in'"""

    def normalized_direction(self) -> Optional[Direction]:
        if self.direction == "out":
            return Direction.OUTBOUND
        if self.direction == "in":
            return Direction.INBOUND
        return None


class LegacyInteractionRecord(InteractionRecord):
    """leads_leadinteractions row: direction 'o' / 'i', kind 'c' for calls"""
    kind: Optional[str] = None
    minutes: Optional[float] = None

    def normalized_direction(self) -> Optional[Direction]:
        if self.direction == "o":
            return Direction.OUTBOUND
        if self.direction == "i":
            return Direction.INBOUND
        return None

    def is_call_over_threshold(self) -> bool:
        return self.kind == LEGACY_CALL_KIND and (self.minutes or 0) > CALL_THRESHOLD_MINUTES


class CallLogRecord(InteractionRecord):
    """call_logs row: free-text direction, duration in seconds"""
    duration: Optional[float] = None

    def normalized_direction(self) -> Optional[Direction]:
        direction = (self.direction or "").lower()
        if "outgoing" in direction or direction == "out":
            return Direction.OUTBOUND
        if "incoming" in direction or direction == "in":
            return Direction.INBOUND
        return None

    def is_call_over_threshold(self) -> bool:
        return (self.duration or 0) > CALL_THRESHOLD_SECONDS


class ManualInteractionRecord(InteractionRecord):
    """Entry of leads.manual_interactions: direction 'out' / 'in', free-text length"""
    kind: Optional[str] = None
    length: Optional[Union[str, int, float]] = None

    def normalized_direction(self) -> Optional[Direction]:
        if self.direction == "out":
            return Direction.OUTBOUND
        if self.direction == "in":
            return Direction.INBOUND
        return None

    def is_call_over_threshold(self) -> bool:
        # An unparseable length reads as 0 minutes and never qualifies
        if self.kind not in MANUAL_CALL_KINDS:
            return False
        return parse_duration(self.length) > CALL_THRESHOLD_MINUTES


RECORD_TYPES = {
    SourceKind.EMAIL: EmailRecord,
    SourceKind.WHATSAPP: WhatsAppRecord,
    SourceKind.LEGACY_INTERACTION: LegacyInteractionRecord,
    SourceKind.CALL_LOG: CallLogRecord,
    SourceKind.MANUAL_INTERACTION: ManualInteractionRecord,
}


@dataclass
class InteractionSummary:
    """
    What a lead's communication history amounts to.

    Recomputed on every evaluation, never persisted. Every flag is an
    OR across all sources.
    """
    has_outbound: bool = False
    has_inbound: bool = False
    has_call_over_2_min: bool = False
    has_any_interaction: bool = False

    @property
    def is_one_directional(self) -> bool:
        return self.has_outbound != self.has_inbound

    def add(self, record: InteractionRecord) -> None:
        """Fold one record into the summary."""
        self.has_any_interaction = True

        direction = record.normalized_direction()
        if direction == Direction.OUTBOUND:
            self.has_outbound = True
        elif direction == Direction.INBOUND:
            self.has_inbound = True

        if record.is_call_over_threshold():
            self.has_call_over_2_min = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_outbound": self.has_outbound,
            "has_inbound": self.has_inbound,
            "has_call_over_2_min": self.has_call_over_2_min,
            "has_any_interaction": self.has_any_interaction,
        }
