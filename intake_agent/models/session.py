from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):
    BRAND = "brand"
    OWNER = "owner"
    UNDETERMINED = "undetermined"


class Slot(str, Enum):
    LOCATION = "location"
    SIZE = "size"
    BUDGET = "budget"
    RENT = "rent"


MONEY_SLOTS = frozenset({Slot.BUDGET, Slot.RENT})


def money_slot(entity_type: EntityType) -> Slot:
    """Brands carry a budget, owners carry a rent."""
    return Slot.RENT if entity_type == EntityType.OWNER else Slot.BUDGET


def required_slots(entity_type: EntityType) -> List[Slot]:
    """Slots in the order the conversation asks for them."""
    return [Slot.LOCATION, Slot.SIZE, money_slot(entity_type)]


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class SessionContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entity_type: EntityType = Field(default=EntityType.UNDETERMINED, alias="entityType")
    collected_details: Dict[str, Any] = Field(default_factory=dict, alias="collectedDetails")
    conversation_history: List[Turn] = Field(default_factory=list, alias="conversationHistory")
    pending_slot: Optional[Slot] = Field(default=None, alias="pendingSlot")


class TurnResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    entity_type: EntityType = Field(alias="entityType")
    collected_details: Dict[str, Any] = Field(default_factory=dict, alias="collectedDetails")
    ready_to_handoff: bool = Field(default=False, alias="readyToHandoff")
    context: SessionContext
