"""
Stage Transition Service
Advances a lead to Precommunication (11) or Communication Started (15)
based on its interaction history.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from supabase import Client

from leadstage.domain.interfaces.lead_store import LeadNotFoundError, LeadStore
from leadstage.domain.models.lead_ref import LeadRef
from leadstage.domain.models.stage import DEFAULT_DELAY_MS, TransitionResult, coerce_stage
from leadstage.domain.services.interaction_aggregator import InteractionAggregator
from leadstage.domain.services.stage_event_recorder import (
    StageEventRecorder,
    StageEventType,
    get_stage_event_recorder,
)
from leadstage.domain.services.transition_rules import decide_target_stage

logger = logging.getLogger(__name__)

LeadStoreFactory = Callable[[LeadRef], LeadStore]


class StageTransitionService:
    """
    Evaluates a lead's interactions and persists the resulting stage.

    Flow per call:
    1. Wait delay_ms so the triggering write is visible
    2. Read the current stage (abort on failure)
    3. Aggregate interactions
    4. Prefer stage 15, then stage 11, else no-op

    There is no lock. The stage guards only admit lower stages and are
    checked against a fresh read every call, so overlapping evaluations
    for one lead write the same value and never move it backward.
    """

    def __init__(
        self,
        store_factory: LeadStoreFactory,
        aggregator: Optional[InteractionAggregator] = None,
        recorder: Optional[StageEventRecorder] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize StageTransitionService.

        Args:
            store_factory: Builds the schema-specific store for a lead
            aggregator: Interaction aggregator (created if not provided)
            recorder: Event recorder (uses global instance if not provided)
            sleep: Awaitable sleep, replaceable in tests
        """
        self.store_factory = store_factory
        self.recorder = recorder or get_stage_event_recorder()
        self.aggregator = aggregator or InteractionAggregator(self.recorder)
        self._sleep = sleep

    async def evaluate_and_update_stage(
        self,
        lead: LeadRef,
        delay_ms: int = DEFAULT_DELAY_MS
    ) -> TransitionResult:
        """
        Evaluate and, if warranted, advance the lead's stage.

        Args:
            lead: Lead to evaluate
            delay_ms: Wait before reading, in milliseconds

        Returns:
            TransitionResult; updated=False with new_stage=None on any failure,
            updated=False with the current stage when nothing applies
        """
        if delay_ms > 0:
            await self._sleep(delay_ms / 1000)

        try:
            return await self._evaluate(lead)
        except Exception as e:
            self.recorder.record(StageEventType.EVALUATION_FAILED, lead, error=str(e))
            return TransitionResult.failed()

    async def _evaluate(self, lead: LeadRef) -> TransitionResult:
        store = self.store_factory(lead)

        try:
            current_stage = coerce_stage(await store.fetch_stage())
        except Exception as e:
            self.recorder.record(
                StageEventType.STAGE_FETCH_FAILED,
                lead,
                missing=isinstance(e, LeadNotFoundError),
                error=str(e),
            )
            return TransitionResult.failed()

        if current_stage is None:
            # No guard admits a null stage
            self.recorder.record(StageEventType.NO_TRANSITION, lead, current_stage=None)
            return TransitionResult(updated=False, new_stage=None)

        summary = await self.aggregator.aggregate(store)
        target = decide_target_stage(summary, current_stage)

        if target is None:
            self.recorder.record(
                StageEventType.NO_TRANSITION,
                lead,
                current_stage=current_stage,
                summary=summary.to_dict(),
            )
            return TransitionResult(updated=False, new_stage=current_stage)

        try:
            await store.update_stage(target)
        except Exception as e:
            self.recorder.record(
                StageEventType.STAGE_UPDATE_FAILED,
                lead,
                from_stage=current_stage,
                to_stage=target,
                error=str(e),
            )
            return TransitionResult.failed()

        self.recorder.record(
            StageEventType.STAGE_UPDATED,
            lead,
            from_stage=current_stage,
            to_stage=target,
            summary=summary.to_dict(),
        )
        return TransitionResult(updated=True, new_stage=target)


def create_stage_transition_service(
    supabase: Client,
    recorder: Optional[StageEventRecorder] = None
) -> StageTransitionService:
    """Build a StageTransitionService backed by Supabase."""
    from leadstage.core.config import get_config_manager
    from leadstage.infrastructure.storage.supabase_lead_store import create_lead_store

    tables = get_config_manager().get_tables()
    return StageTransitionService(
        store_factory=lambda lead: create_lead_store(supabase, lead, tables),
        recorder=recorder,
    )
