"""Domain models"""

# Lead identity
from .lead_ref import (
    LeadSchema,
    LeadRef,
    InvalidLeadIdentifierError,
)

# Stages
from .stage import (
    PRECOMMUNICATION_STAGE_ID,
    COMMUNICATION_STARTED_STAGE_ID,
    TriggerKind,
    TransitionResult,
    coerce_stage,
)

# Interactions
from .interaction import (
    Direction,
    SourceKind,
    InteractionRecord,
    EmailRecord,
    WhatsAppRecord,
    LegacyInteractionRecord,
    CallLogRecord,
    ManualInteractionRecord,
    InteractionSummary,
)

__all__ = [
    "LeadSchema",
    "LeadRef",
    "InvalidLeadIdentifierError",
    "PRECOMMUNICATION_STAGE_ID",
    "COMMUNICATION_STARTED_STAGE_ID",
    "TriggerKind",
    "TransitionResult",
    "coerce_stage",
    "Direction",
    "SourceKind",
    "InteractionRecord",
    "EmailRecord",
    "WhatsAppRecord",
    "LegacyInteractionRecord",
    "CallLogRecord",
    "ManualInteractionRecord",
    "InteractionSummary",
]
