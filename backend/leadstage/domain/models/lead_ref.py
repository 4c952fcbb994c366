"""
Lead Reference
Identifies a lead in either the legacy schema (numeric id) or the new schema (UUID)
"""
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


LEGACY_PREFIX = "legacy_"


class LeadSchema(str, Enum):
    """Which lead table a lead lives in"""
    LEGACY = "legacy"  # leads_lead, bigint ids
    NEW = "new"        # leads, uuid ids


class InvalidLeadIdentifierError(ValueError):
    """Raised when a lead identifier cannot be interpreted in either schema."""
    def __init__(self, message: str = "Lead identifier is neither a legacy id nor a UUID"):
        self.message = message
        super().__init__(self.message)


@dataclass(frozen=True)
class LeadRef:
    """
    Tagged lead identifier.

    Exactly one schema applies: legacy refs carry an int, new refs carry
    a canonical UUID string.
    """
    schema: LeadSchema
    id: Union[int, str]

    @classmethod
    def legacy(cls, legacy_id: Union[int, str]) -> "LeadRef":
        try:
            numeric_id = int(legacy_id)
        except (TypeError, ValueError):
            raise InvalidLeadIdentifierError(f"Invalid legacy lead id: {legacy_id!r}")
        if numeric_id <= 0:
            raise InvalidLeadIdentifierError(f"Invalid legacy lead id: {legacy_id!r}")
        return cls(LeadSchema.LEGACY, numeric_id)

    @classmethod
    def new(cls, lead_id: str) -> "LeadRef":
        try:
            canonical = str(uuid.UUID(str(lead_id)))
        except (TypeError, ValueError, AttributeError):
            raise InvalidLeadIdentifierError(f"Invalid lead UUID: {lead_id!r}")
        return cls(LeadSchema.NEW, canonical)

    @classmethod
    def parse(cls, text: str) -> "LeadRef":
        """
        Parse the display form of a lead id.

        "legacy_123" -> legacy ref 123, anything else must be a UUID.
        """
        value = str(text).strip()
        if value.startswith(LEGACY_PREFIX):
            return cls.legacy(value[len(LEGACY_PREFIX):])
        return cls.new(value)

    @classmethod
    def resolve(
        cls,
        primary_id: Optional[Union[str, int]] = None,
        legacy_id: Optional[Union[str, int]] = None
    ) -> Optional["LeadRef"]:
        """
        Resolve the pair of identifiers recorded alongside an interaction.

        A legacy id wins when present. Returns None when neither id is usable.
        """
        if legacy_id not in (None, "", 0):
            try:
                return cls.legacy(legacy_id)
            except InvalidLeadIdentifierError:
                pass

        if primary_id in (None, ""):
            return None

        if isinstance(primary_id, int) or str(primary_id).strip().isdigit():
            # call_logs hand over bare numeric legacy ids
            try:
                return cls.legacy(primary_id)
            except InvalidLeadIdentifierError:
                return None

        try:
            return cls.parse(primary_id)
        except InvalidLeadIdentifierError:
            return None

    @property
    def is_legacy(self) -> bool:
        return self.schema == LeadSchema.LEGACY

    def __str__(self) -> str:
        if self.is_legacy:
            return f"{LEGACY_PREFIX}{self.id}"
        return str(self.id)
