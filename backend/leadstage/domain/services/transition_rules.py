"""
Stage Transition Rules
Pure predicates deciding whether an interaction summary advances a lead
"""
from typing import Optional

from leadstage.domain.models.interaction import InteractionSummary
from leadstage.domain.models.stage import (
    PRECOMMUNICATION_STAGE_ID,
    COMMUNICATION_STARTED_STAGE_ID,
    PRECOMMUNICATION_ENTRY_STAGES,
    COMMUNICATION_STARTED_ENTRY_STAGES,
)


def should_precommunicate(summary: InteractionSummary, current_stage: Optional[int]) -> bool:
    """
    Stage 11: contact went one way only and no call ran past 2 minutes.

    Short calls still count toward the direction flags.
    """
    if current_stage not in PRECOMMUNICATION_ENTRY_STAGES:
        return False
    if not summary.has_any_interaction:
        return False
    if not summary.is_one_directional:
        return False
    return not summary.has_call_over_2_min


def should_start_communication(summary: InteractionSummary, current_stage: Optional[int]) -> bool:
    """Stage 15: both directions seen and at least one call over 2 minutes."""
    if current_stage not in COMMUNICATION_STARTED_ENTRY_STAGES:
        return False
    if not summary.has_any_interaction:
        return False
    return summary.has_outbound and summary.has_inbound and summary.has_call_over_2_min


def decide_target_stage(summary: InteractionSummary, current_stage: Optional[int]) -> Optional[int]:
    """
    Pick the stage to move to, or None to stay put.

    Communication Started wins over Precommunication.
    """
    if should_start_communication(summary, current_stage):
        return COMMUNICATION_STARTED_STAGE_ID
    if should_precommunicate(summary, current_stage):
        return PRECOMMUNICATION_STAGE_ID
    return None
