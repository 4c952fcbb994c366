"""
Shared fixtures for stage engine tests
"""
from typing import Any, Dict, List, Optional, Union
from unittest.mock import MagicMock

import pytest

from leadstage.domain.interfaces.lead_store import (
    InteractionSource,
    LeadNotFoundError,
    LeadStore,
)
from leadstage.domain.models.interaction import SourceKind
from leadstage.domain.models.lead_ref import LeadRef
from leadstage.domain.services.stage_event_recorder import StageEventRecorder


class InMemoryLeadStore(LeadStore):
    """LeadStore over plain dicts. A source mapped to an Exception raises it."""

    def __init__(
        self,
        lead: LeadRef,
        stage: Any = 0,
        sources: Optional[Dict[SourceKind, Union[List[Dict[str, Any]], Exception]]] = None,
        missing: bool = False,
        fetch_error: Optional[Exception] = None,
        update_error: Optional[Exception] = None
    ):
        super().__init__(lead)
        self.stage = stage
        self.sources = sources or {}
        self.missing = missing
        self.fetch_error = fetch_error
        self.update_error = update_error
        self.writes: List[int] = []
        self.source_calls: List[SourceKind] = []

    async def fetch_stage(self):
        if self.fetch_error:
            raise self.fetch_error
        if self.missing:
            raise LeadNotFoundError(self.lead)
        return self.stage

    async def update_stage(self, stage: int) -> None:
        if self.update_error:
            raise self.update_error
        self.writes.append(stage)
        self.stage = stage

    def interaction_sources(self) -> List[InteractionSource]:
        return [InteractionSource(kind, self._fetcher(kind)) for kind in self.sources]

    def _fetcher(self, kind: SourceKind):
        async def fetch():
            self.source_calls.append(kind)
            rows = self.sources[kind]
            if isinstance(rows, Exception):
                raise rows
            return rows
        return fetch


LEAD_UUID = "3f1c2d4e-5a6b-4c7d-8e9f-0a1b2c3d4e5f"


@pytest.fixture
def recorder():
    return StageEventRecorder()


@pytest.fixture
def new_lead():
    return LeadRef.new(LEAD_UUID)


@pytest.fixture
def legacy_lead():
    return LeadRef.legacy(4821)


@pytest.fixture
def make_store():
    """Factory for InMemoryLeadStore instances."""
    def factory(lead: LeadRef, **kwargs) -> InMemoryLeadStore:
        return InMemoryLeadStore(lead, **kwargs)
    return factory


@pytest.fixture
def sleep_calls():
    """Sleep stand-in that records requested durations instead of waiting."""
    calls: List[float] = []

    async def fake_sleep(seconds: float) -> None:
        calls.append(seconds)

    fake_sleep.calls = calls
    return fake_sleep


@pytest.fixture
def make_supabase():
    """
    Factory for Supabase mocks whose query chains resolve per table.

    table_data maps table name -> rows returned by execute(). The mock
    tables are exposed as mock_supabase.tables for call assertions.
    """
    def factory(table_data: Optional[Dict[str, Any]] = None) -> MagicMock:
        table_data = table_data or {}
        mock_supabase = MagicMock()
        tables = {}

        def table_side_effect(table_name):
            if table_name not in tables:
                mock_table = MagicMock()
                mock_table.select.return_value = mock_table
                mock_table.update.return_value = mock_table
                mock_table.eq.return_value = mock_table
                mock_table.limit.return_value = mock_table
                mock_table.execute.return_value = MagicMock(data=table_data.get(table_name, []))
                tables[table_name] = mock_table
            return tables[table_name]

        mock_supabase.table.side_effect = table_side_effect
        mock_supabase.tables = tables
        return mock_supabase
    return factory
