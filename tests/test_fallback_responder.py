from intake_agent.models.session import EntityType, Slot
from intake_agent.services.fallback_responder import (
    CLARIFICATION_MESSAGE,
    ambiguous_number_reply,
    fallback_reply,
)


def test_undetermined_gets_the_clarification():
    reply = fallback_reply(EntityType.UNDETERMINED, {})
    assert reply.message == CLARIFICATION_MESSAGE
    assert reply.asks is None


def test_fresh_owner_is_asked_for_location():
    reply = fallback_reply(EntityType.OWNER, {})
    assert reply.message.startswith("Great! I'd love to help you list your property.")
    assert reply.asks == Slot.LOCATION


def test_size_acknowledged_then_next_slot():
    reply = fallback_reply(EntityType.OWNER, {"size": 800}, Slot.SIZE, "800")
    assert reply.message.startswith("Great! Size noted: 800 sqft.")
    assert reply.asks == Slot.LOCATION

    reply = fallback_reply(EntityType.OWNER, {"location": "Koramangala", "size": 800}, Slot.SIZE, "800")
    assert "monthly rent" in reply.message
    assert reply.asks == Slot.RENT


def test_money_acknowledged_with_formatted_amount():
    details = {"location": "HSR Layout", "size": 500, "budget": 50000}
    reply = fallback_reply(EntityType.BRAND, details, Slot.BUDGET, "50")
    assert reply.message.startswith("Perfect! I've noted ₹50,000/month.")
    assert "search for the best matches" in reply.message
    assert reply.asks is None


def test_vocabulary_follows_entity_type():
    partial = {"location": "Koramangala", "size": 800}
    owner = fallback_reply(EntityType.OWNER, partial)
    brand = fallback_reply(EntityType.BRAND, partial)
    assert "rent" in owner.message and "budget" not in owner.message
    assert "budget" in brand.message and "rent" not in brand.message
    assert owner.message.startswith("Got it!")


def test_replies_are_deterministic():
    args = (EntityType.BRAND, {"location": "Whitefield"}, Slot.LOCATION, "whitefield")
    assert fallback_reply(*args) == fallback_reply(*args)


def test_zero_money_reply_asks_again():
    reply = fallback_reply(EntityType.OWNER, {"location": "Koramangala", "size": 800}, Slot.RENT, "0")
    assert reply.message.startswith("Got it!")
    assert "₹0" not in reply.message
    assert reply.asks == Slot.RENT


def test_ambiguous_number_offers_both_readings():
    reply = ambiguous_number_reply(EntityType.BRAND, 50)
    assert "50 sqft (size)" in reply.message
    assert "₹50,000/month (budget)" in reply.message
