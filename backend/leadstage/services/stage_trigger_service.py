"""
Stage Trigger Service
Schedules a stage evaluation after an email, WhatsApp message, manual
interaction or call has been recorded.

Triggers are fire-and-forget: they run as their own asyncio task, contain
every error, and the caller that recorded the interaction never waits on
or fails because of them.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Set, Union

from supabase import Client

from leadstage.domain.models.lead_ref import LeadRef
from leadstage.domain.models.stage import DEFAULT_TRIGGER_DELAYS_MS, TransitionResult, TriggerKind
from leadstage.domain.services.stage_event_recorder import (
    StageEventRecorder,
    StageEventType,
    get_stage_event_recorder,
)
from leadstage.services.stage_transition_service import (
    StageTransitionService,
    create_stage_transition_service,
)

logger = logging.getLogger(__name__)

LeadId = Optional[Union[str, int]]


@dataclass
class TriggerOutcome:
    """What a trigger did, delivered to the optional observer."""
    kind: TriggerKind
    lead: Optional[LeadRef] = None
    result: Optional[TransitionResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.result is not None


ResultObserver = Callable[[TriggerOutcome], None]


class StageTriggerService:
    """
    One trigger per interaction kind, each with its own evaluation delay.

    Usage:
        triggers = StageTriggerService(transition_service)
        triggers.after_email(client_id=lead_uuid, legacy_id=None)
    """

    def __init__(
        self,
        transition_service: StageTransitionService,
        recorder: Optional[StageEventRecorder] = None,
        delays_ms: Optional[Dict[TriggerKind, int]] = None
    ):
        self.transition_service = transition_service
        self.recorder = recorder or get_stage_event_recorder()
        self.delays_ms = {**DEFAULT_TRIGGER_DELAYS_MS, **(delays_ms or {})}
        self._tasks: Set[asyncio.Task] = set()

    def after_email(
        self,
        client_id: LeadId,
        legacy_id: LeadId = None,
        on_result: Optional[ResultObserver] = None
    ) -> asyncio.Task:
        """Evaluate after an email is saved (emails.client_id / emails.legacy_id)."""
        return self.schedule(TriggerKind.EMAIL, client_id, legacy_id, on_result)

    def after_whatsapp(
        self,
        lead_id: LeadId,
        legacy_id: LeadId = None,
        on_result: Optional[ResultObserver] = None
    ) -> asyncio.Task:
        """Evaluate after a WhatsApp message is saved."""
        return self.schedule(TriggerKind.WHATSAPP, lead_id, legacy_id, on_result)

    def after_manual_interaction(
        self,
        lead_id: LeadId,
        legacy_id: LeadId = None,
        on_result: Optional[ResultObserver] = None
    ) -> asyncio.Task:
        """Evaluate after a manual interaction is saved. lead_id may be "legacy_<n>"."""
        return self.schedule(TriggerKind.MANUAL, lead_id, legacy_id, on_result)

    def after_call(
        self,
        lead_id: LeadId,
        legacy_id: LeadId = None,
        on_result: Optional[ResultObserver] = None
    ) -> asyncio.Task:
        """Evaluate after a call is logged. A bare numeric lead_id is a legacy id."""
        return self.schedule(TriggerKind.CALL, lead_id, legacy_id, on_result)

    def schedule(
        self,
        kind: TriggerKind,
        primary_id: LeadId,
        legacy_id: LeadId = None,
        on_result: Optional[ResultObserver] = None
    ) -> asyncio.Task:
        """
        Start the evaluation as a separate task and return it immediately.

        Must be called from within a running event loop. The returned task
        never raises; await it only for diagnostics.
        """
        task = asyncio.create_task(self.run(kind, primary_id, legacy_id, on_result))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(
        self,
        kind: TriggerKind,
        primary_id: LeadId,
        legacy_id: LeadId = None,
        on_result: Optional[ResultObserver] = None
    ) -> TriggerOutcome:
        """Resolve the lead and evaluate it, containing every error."""
        outcome = TriggerOutcome(kind=kind)

        try:
            lead = LeadRef.resolve(primary_id, legacy_id)
            if lead is None:
                self.recorder.record(
                    StageEventType.MISSING_IDENTIFIER,
                    trigger=kind.value,
                    primary_id=primary_id,
                    legacy_id=legacy_id,
                )
                outcome.error = StageEventType.MISSING_IDENTIFIER.value
            else:
                outcome.lead = lead
                logger.debug(f"Evaluating stage for lead {lead} after {kind.value}")
                outcome.result = await self.transition_service.evaluate_and_update_stage(
                    lead,
                    self.delays_ms[kind]
                )
        except Exception as e:
            self.recorder.record(
                StageEventType.TRIGGER_FAILED,
                outcome.lead,
                trigger=kind.value,
                error=str(e),
            )
            outcome.error = str(e)

        if on_result is not None:
            try:
                on_result(outcome)
            except Exception as e:
                logger.error(f"Stage trigger observer failed: {e}")

        return outcome

    @property
    def pending_count(self) -> int:
        """Triggers scheduled but not finished yet."""
        return len(self._tasks)


# Singleton instance helper
_stage_trigger_service: Optional[StageTriggerService] = None


def get_stage_trigger_service(supabase: Client) -> StageTriggerService:
    """Get or create StageTriggerService instance."""
    global _stage_trigger_service
    if _stage_trigger_service is None:
        from leadstage.core.config import get_config_manager

        _stage_trigger_service = StageTriggerService(
            create_stage_transition_service(supabase),
            delays_ms=get_config_manager().get_trigger_delays(),
        )
    return _stage_trigger_service


def trigger_stage_evaluation_after_email(
    supabase: Client,
    client_id: LeadId,
    legacy_id: LeadId = None,
    on_result: Optional[ResultObserver] = None
) -> asyncio.Task:
    return get_stage_trigger_service(supabase).after_email(client_id, legacy_id, on_result)


def trigger_stage_evaluation_after_whatsapp(
    supabase: Client,
    lead_id: LeadId,
    legacy_id: LeadId = None,
    on_result: Optional[ResultObserver] = None
) -> asyncio.Task:
    return get_stage_trigger_service(supabase).after_whatsapp(lead_id, legacy_id, on_result)


def trigger_stage_evaluation_after_manual_interaction(
    supabase: Client,
    lead_id: LeadId,
    legacy_id: LeadId = None,
    on_result: Optional[ResultObserver] = None
) -> asyncio.Task:
    return get_stage_trigger_service(supabase).after_manual_interaction(lead_id, legacy_id, on_result)


def trigger_stage_evaluation_after_call(
    supabase: Client,
    lead_id: LeadId,
    legacy_id: LeadId = None,
    on_result: Optional[ResultObserver] = None
) -> asyncio.Task:
    return get_stage_trigger_service(supabase).after_call(lead_id, legacy_id, on_result)
