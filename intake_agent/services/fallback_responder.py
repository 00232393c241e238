from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from intake_agent.models.session import EntityType, MONEY_SLOTS, Slot, money_slot, required_slots
from intake_agent.services.completion import format_amount, missing_slots
from intake_agent.services.extractor import numeric_reply
from intake_agent.services.magnitude import disambiguate, format_inr

_QUESTIONS: Dict[EntityType, Dict[Slot, str]] = {
    EntityType.OWNER: {
        Slot.LOCATION: "Where is your property located? (Please share the city and area)",
        Slot.SIZE: "What's the size of your property? (e.g., 500 sqft)",
        Slot.RENT: "What's the monthly rent you're expecting for this property?",
    },
    EntityType.BRAND: {
        Slot.LOCATION: "Where are you looking for space? (Please share the city and area, e.g., Bangalore, Koramangala)",
        Slot.SIZE: "What size space are you looking for? (e.g., 500 sqft, or 1000-2000 sqft for a range)",
        Slot.BUDGET: "What's your monthly budget for the space? (e.g., ₹50k - ₹1 lakh)",
    },
}

_OPENERS: Dict[EntityType, str] = {
    EntityType.OWNER: "Great! I'd love to help you list your property.",
    EntityType.BRAND: "Great! I'd love to help you find the right space.",
}

_READY: Dict[EntityType, str] = {
    EntityType.OWNER: "Perfect! I have all the key details. Let me take you to the listing form where everything will be pre-filled.",
    EntityType.BRAND: "Perfect! I have all the details. Let me search for the best matches for you!",
}

_READY_AFTER_ACK: Dict[EntityType, str] = {
    EntityType.OWNER: "I have all the key details. Let me take you to the listing form!",
    EntityType.BRAND: "I have all the details. Let me search for the best matches for you!",
}

CLARIFICATION_MESSAGE = (
    "Just to clarify - are you:\n\n"
    "1. Looking for space for your business (Brand/Tenant)\n"
    "2. Offering space you own (Property Owner)\n\n"
    "This helps me understand your requirements better."
)


@dataclass(frozen=True)
class FallbackReply:
    message: str
    asks: Optional[Slot] = None


def question_for(entity_type: EntityType, slot: Slot) -> str:
    return _QUESTIONS[entity_type][slot]


def ambiguous_number_reply(entity_type: EntityType, number: int) -> FallbackReply:
    """Ask whether a bare number nobody asked for is an area or an amount."""
    money = money_slot(entity_type).value
    return FallbackReply(
        f"Just to clarify, did you mean {number} sqft (size) or {format_inr(disambiguate(number))}/month ({money})? "
        f"Please include the unit, e.g. \"{number} sqft\"."
    )


def _next_step(entity_type: EntityType, details: Dict[str, Any], lead: str) -> FallbackReply:
    missing = missing_slots(entity_type, details)
    if not missing:
        return FallbackReply(f"{lead} {_READY_AFTER_ACK[entity_type]}")
    question = question_for(entity_type, missing[0])
    return FallbackReply(f"{lead} {question}".strip(), asks=missing[0])


def fallback_reply(
    entity_type: EntityType,
    details: Dict[str, Any],
    pending_slot: Optional[Slot] = None,
    utterance: str = "",
) -> FallbackReply:
    """Deterministic acknowledgement plus the next question, no network involved."""
    if entity_type == EntityType.UNDETERMINED:
        return FallbackReply(CLARIFICATION_MESSAGE)

    details = details or {}
    money_key = money_slot(entity_type).value

    if pending_slot in MONEY_SLOTS and details.get(money_key) and numeric_reply(utterance) is not None:
        shown = format_amount(details[money_key])
        return _next_step(entity_type, details, f"Perfect! I've noted {shown}/month.")

    if pending_slot == Slot.SIZE and details.get(Slot.SIZE.value):
        return _next_step(entity_type, details, f"Great! Size noted: {details[Slot.SIZE.value]} sqft.")

    if pending_slot == Slot.LOCATION and details.get(Slot.LOCATION.value):
        return _next_step(entity_type, details, f"Perfect! Location noted: {details[Slot.LOCATION.value]}.")

    missing = missing_slots(entity_type, details)
    if not missing:
        return FallbackReply(_READY[entity_type])
    opener = _OPENERS[entity_type] if len(missing) == len(required_slots(entity_type)) else "Got it!"
    return FallbackReply(f"{opener} {question_for(entity_type, missing[0])}", asks=missing[0])
