"""
Stage Transition API Endpoints
Lets the CRM front end and the mail/WhatsApp sync backends report a saved
interaction, and exposes diagnostics for the stage engine.
"""
import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from leadstage.api.v1.dependencies import (
    get_default_delay_ms,
    get_recorder,
    get_transition_service,
    get_trigger_service,
)
from leadstage.domain.models.lead_ref import LeadRef
from leadstage.domain.models.stage import TransitionResult, TriggerKind
from leadstage.domain.services.stage_event_recorder import StageEventRecorder
from leadstage.services.stage_transition_service import StageTransitionService
from leadstage.services.stage_trigger_service import StageTriggerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stage-transitions", tags=["stage-transitions"])


class TriggerRequest(BaseModel):
    """Identifiers recorded alongside the interaction"""
    lead_id: Optional[Union[str, int]] = None
    legacy_id: Optional[Union[int, str]] = None


class EvaluateRequest(TriggerRequest):
    # Falls back to stage_engine.default_delay_ms
    delay_ms: Optional[int] = None


class TriggerResponse(BaseModel):
    scheduled: bool
    kind: TriggerKind


@router.post(
    "/triggers/{kind}",
    response_model=TriggerResponse,
    status_code=status.HTTP_202_ACCEPTED
)
async def trigger_stage_evaluation(
    kind: TriggerKind,
    request: TriggerRequest,
    triggers: StageTriggerService = Depends(get_trigger_service)
):
    """
    Schedule a stage evaluation for a just-recorded interaction.

    Returns as soon as the evaluation is scheduled; its outcome never
    affects this response. Missing identifiers are logged by the trigger.
    """
    triggers.schedule(kind, request.lead_id, request.legacy_id)
    return TriggerResponse(scheduled=True, kind=kind)


@router.post("/evaluate", response_model=TransitionResult)
async def evaluate_stage(
    request: EvaluateRequest,
    transitions: StageTransitionService = Depends(get_transition_service),
    default_delay_ms: int = Depends(get_default_delay_ms)
):
    """Evaluate a lead now and return the decision (diagnostics)."""
    lead = LeadRef.resolve(request.lead_id, request.legacy_id)
    if lead is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="A valid lead_id or legacy_id is required"
        )

    delay_ms = default_delay_ms if request.delay_ms is None else request.delay_ms
    return await transitions.evaluate_and_update_stage(lead, max(0, delay_ms))


@router.get("/events")
async def list_stage_events(
    limit: int = Query(50, ge=1, le=500),
    lead: Optional[str] = None,
    recorder: StageEventRecorder = Depends(get_recorder)
) -> List[dict]:
    """Recent stage engine events, newest last. Optionally filtered to one lead."""
    events = recorder.events_for(lead)[-limit:] if lead else recorder.recent(limit)
    return [event.to_dict() for event in events]
