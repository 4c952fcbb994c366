"""
Supabase Lead Stores
Stage and interaction access for legacy (bigint) and new (uuid) leads
"""
import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from leadstage.core.config import DEFAULT_TABLES
from leadstage.domain.interfaces.lead_store import (
    InteractionSource,
    LeadNotFoundError,
    LeadStore,
)
from leadstage.domain.models.interaction import SourceKind
from leadstage.domain.models.lead_ref import LeadRef

logger = logging.getLogger(__name__)


class SupabaseLeadStore(LeadStore):
    """Shared Supabase plumbing; subclasses pick tables and key columns."""

    lead_table_key: str = ""

    def __init__(self, supabase: Client, lead: LeadRef, tables: Optional[Dict[str, str]] = None):
        super().__init__(lead)
        self.supabase = supabase
        self.tables = {**DEFAULT_TABLES, **(tables or {})}

    @property
    def lead_table(self) -> str:
        return self.tables[self.lead_table_key]

    async def fetch_stage(self) -> Optional[Any]:
        response = self.supabase.table(self.lead_table).select(
            "stage"
        ).eq("id", self.lead.id).limit(1).execute()

        if not response.data:
            raise LeadNotFoundError(self.lead)

        return response.data[0].get("stage")

    async def update_stage(self, stage: int) -> None:
        self.supabase.table(self.lead_table).update(
            {"stage": stage}
        ).eq("id", self.lead.id).execute()

        logger.info(f"Updated {self.lead_table} stage for lead {self.lead} to {stage}")

    async def _select(self, table_key: str, columns: str, key_column: str) -> List[Dict[str, Any]]:
        response = self.supabase.table(self.tables[table_key]).select(
            columns
        ).eq(key_column, self.lead.id).execute()
        return response.data or []


class SupabaseLegacyLeadStore(SupabaseLeadStore):
    """
    Lead in the legacy schema.

    Interactions live in emails / whatsapp_messages (keyed by legacy_id),
    the generic leads_leadinteractions log and call_logs (keyed by lead_id).
    """

    lead_table_key = "legacy_leads"

    def interaction_sources(self) -> List[InteractionSource]:
        return [
            InteractionSource(SourceKind.EMAIL, self.fetch_emails),
            InteractionSource(SourceKind.WHATSAPP, self.fetch_whatsapp_messages),
            InteractionSource(SourceKind.LEGACY_INTERACTION, self.fetch_legacy_interactions),
            InteractionSource(SourceKind.CALL_LOG, self.fetch_call_logs),
        ]

    async def fetch_emails(self) -> List[Dict[str, Any]]:
        return await self._select("emails", "direction", "legacy_id")

    async def fetch_whatsapp_messages(self) -> List[Dict[str, Any]]:
        return await self._select("whatsapp_messages", "direction", "legacy_id")

    async def fetch_legacy_interactions(self) -> List[Dict[str, Any]]:
        return await self._select("legacy_interactions", "direction, kind, minutes", "lead_id")

    async def fetch_call_logs(self) -> List[Dict[str, Any]]:
        return await self._select("call_logs", "direction, duration", "lead_id")


class SupabaseNewLeadStore(SupabaseLeadStore):
    """
    Lead in the new schema.

    call_logs.lead_id is bigint, so it is never queried for uuid leads;
    their calls are in the manual_interactions array on the lead row.
    """

    lead_table_key = "leads"

    def interaction_sources(self) -> List[InteractionSource]:
        return [
            InteractionSource(SourceKind.EMAIL, self.fetch_emails),
            InteractionSource(SourceKind.WHATSAPP, self.fetch_whatsapp_messages),
            InteractionSource(SourceKind.MANUAL_INTERACTION, self.fetch_manual_interactions),
        ]

    async def fetch_emails(self) -> List[Dict[str, Any]]:
        return await self._select("emails", "direction", "client_id")

    async def fetch_whatsapp_messages(self) -> List[Dict[str, Any]]:
        return await self._select("whatsapp_messages", "direction", "lead_id")

    async def fetch_manual_interactions(self) -> Any:
        """Raw manual_interactions column; the aggregator normalizes it."""
        response = self.supabase.table(self.lead_table).select(
            "manual_interactions"
        ).eq("id", self.lead.id).limit(1).execute()

        if not response.data:
            return []
        return response.data[0].get("manual_interactions")


def create_lead_store(
    supabase: Client,
    lead: LeadRef,
    tables: Optional[Dict[str, str]] = None
) -> SupabaseLeadStore:
    """Pick the store implementation for the lead's schema."""
    if lead.is_legacy:
        return SupabaseLegacyLeadStore(supabase, lead, tables)
    return SupabaseNewLeadStore(supabase, lead, tables)
