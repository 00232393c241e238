from intake_agent.models.session import EntityType, Turn
from intake_agent.services.classifier import CLASSIFIER_RULES, classify_entity, history_text
from intake_agent.services.fallback_responder import CLARIFICATION_MESSAGE


def test_brand_cues():
    assert classify_entity("I'm a brand") == EntityType.BRAND
    assert classify_entity("We need space for our cafe") == EntityType.BRAND
    assert classify_entity("looking for a retail shop") == EntityType.BRAND


def test_owner_cues():
    assert classify_entity("I have a property to rent out") == EntityType.OWNER
    assert classify_entity("I want to list my shop") == EntityType.OWNER
    assert classify_entity("I'm a landlord") == EntityType.OWNER


def test_numbered_option_replies():
    assert classify_entity("1") == EntityType.BRAND
    assert classify_entity("option 2") == EntityType.OWNER


def test_no_cue_is_undetermined():
    assert classify_entity("hello") == EntityType.UNDETERMINED
    assert classify_entity("") == EntityType.UNDETERMINED


def test_brand_rules_take_precedence():
    assert classify_entity("I'm a brand and also a property owner") == EntityType.BRAND
    labels = [label for label, _ in CLASSIFIER_RULES]
    last_brand = max(i for i, label in enumerate(labels) if label == EntityType.BRAND)
    first_owner = min(i for i, label in enumerate(labels) if label == EntityType.OWNER)
    assert last_brand < first_owner


def test_history_is_checked_before_utterance():
    assert classify_entity("800", "i am a landlord") == EntityType.OWNER


def test_assistant_turns_do_not_classify_the_user():
    history = [
        Turn(role="user", content="hi"),
        Turn(role="assistant", content=CLARIFICATION_MESSAGE),
    ]
    assert history_text(history) == "hi"
    assert classify_entity("hello", history_text(history)) == EntityType.UNDETERMINED
