"""
Lead Store Interface
What the stage engine needs from the schema a lead lives in
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, NamedTuple, Optional

from leadstage.domain.models.interaction import SourceKind
from leadstage.domain.models.lead_ref import LeadRef


class LeadNotFoundError(LookupError):
    """Raised when the lead row holding the stage does not exist."""
    def __init__(self, lead: LeadRef):
        self.lead = lead
        self.message = f"Lead {lead} not found"
        super().__init__(self.message)


class InteractionSource(NamedTuple):
    """One independently queried interaction store for a lead."""
    kind: SourceKind
    fetch: Callable[[], Awaitable[List[Dict[str, Any]]]]


class LeadStore(ABC):
    """
    Abstract access to one lead's stage and interaction history.

    One implementation per schema; the right one is chosen once when the
    lead is resolved.
    """

    def __init__(self, lead: LeadRef):
        self.lead = lead

    @abstractmethod
    async def fetch_stage(self) -> Optional[Any]:
        """
        Read the raw persisted stage value.

        Raises:
            LeadNotFoundError: If the lead row does not exist
        """
        pass

    @abstractmethod
    async def update_stage(self, stage: int) -> None:
        """Write the stage column for this lead."""
        pass

    @abstractmethod
    def interaction_sources(self) -> List[InteractionSource]:
        """Interaction stores to aggregate, each queried on its own."""
        pass
