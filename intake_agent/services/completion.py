from __future__ import annotations

from typing import Any, Dict, List, Optional

from intake_agent.models.session import EntityType, Slot, required_slots
from intake_agent.services.magnitude import format_inr
from intake_agent.services.state_merger import is_empty


def missing_slots(entity_type: EntityType, details: Dict[str, Any]) -> List[Slot]:
    if entity_type == EntityType.UNDETERMINED:
        return []
    return [slot for slot in required_slots(entity_type) if is_empty(details.get(slot.value))]


def is_complete(entity_type: EntityType, details: Dict[str, Any]) -> bool:
    if entity_type == EntityType.UNDETERMINED:
        return False
    return not missing_slots(entity_type, details)


def format_amount(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_inr(int(value))
    return str(value)


def completion_summary(entity_type: EntityType, details: Dict[str, Any]) -> Optional[str]:
    """Listing handoff message once an owner has given location, size and rent.

    Brand sessions never short-circuit here; they keep talking until the caller
    routes them on.
    """
    if entity_type != EntityType.OWNER or not is_complete(entity_type, details):
        return None
    return (
        "Perfect! I have all the key details:\n\n"
        f"📍 Location: {details[Slot.LOCATION.value]}\n"
        f"📐 Size: {details[Slot.SIZE.value]} sqft\n"
        f"💰 Rent: {format_amount(details[Slot.RENT.value])}/month\n\n"
        "Let me take you to the listing form!"
    )
