"""
Interaction Aggregator
Folds every interaction store for a lead into one InteractionSummary
"""
import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from leadstage.domain.interfaces.lead_store import InteractionSource, LeadStore
from leadstage.domain.models.interaction import (
    InteractionSummary,
    RECORD_TYPES,
    SourceKind,
)
from leadstage.domain.services.stage_event_recorder import (
    StageEventRecorder,
    StageEventType,
    get_stage_event_recorder,
)

logger = logging.getLogger(__name__)


def coerce_manual_interactions(value: Any) -> List[Any]:
    """
    Normalize the leads.manual_interactions column to a list.

    The column is jsonb but older rows hold the array as JSON text.
    Anything that is not an array contributes nothing. Entries are kept
    as-is so that malformed ones still count as interactions.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.debug("manual_interactions is not valid JSON, ignoring")
            return []
    if not isinstance(value, list):
        return []
    return value


class InteractionAggregator:
    """
    Builds an InteractionSummary from all of a lead's interaction stores.

    Each source is queried independently. A failing source is recorded and
    treated as empty; the remaining sources are still read.
    """

    def __init__(self, recorder: Optional[StageEventRecorder] = None):
        self.recorder = recorder or get_stage_event_recorder()

    async def aggregate(self, store: LeadStore) -> InteractionSummary:
        """
        Build the summary for the store's lead.

        Args:
            store: Schema-specific store for the lead

        Returns:
            InteractionSummary with every flag OR-reduced across sources
        """
        summary = InteractionSummary()

        for source in store.interaction_sources():
            rows = await self._fetch_rows(store, source)
            if rows:
                self._fold_rows(summary, source.kind, rows)

        logger.debug(
            f"Interaction summary for lead {store.lead}: {summary.to_dict()}",
            extra={"lead": str(store.lead), "summary": summary.to_dict()}
        )
        return summary

    async def _fetch_rows(self, store: LeadStore, source: InteractionSource) -> List[Any]:
        try:
            rows = await source.fetch()
        except Exception as e:
            self.recorder.record(
                StageEventType.SOURCE_QUERY_FAILED,
                store.lead,
                source=source.kind.value,
                error=str(e),
            )
            return []

        if source.kind == SourceKind.MANUAL_INTERACTION:
            return coerce_manual_interactions(rows)
        return rows or []

    def _fold_rows(
        self,
        summary: InteractionSummary,
        kind: SourceKind,
        rows: List[Any]
    ) -> None:
        record_type = RECORD_TYPES[kind]
        summary.has_any_interaction = True

        for row in rows:
            if not isinstance(row, dict):
                logger.debug(f"Skipping non-object {kind.value} entry: {row!r}")
                continue
            try:
                record = record_type.model_validate(row)
            except ValidationError as e:
                logger.debug(f"Skipping malformed {kind.value} row: {e}")
                continue
            summary.add(record)
