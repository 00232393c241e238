import time

from intake_agent.models.session import EntityType, Slot, Turn
from intake_agent.services.extractor import (
    SIZE_RULES,
    QuestionContext,
    apply_rules,
    clean_location,
    extract_details,
    infer_pending_slot,
    numeric_reply,
    resolve_references,
)


def test_location_after_preposition():
    assert extract_details("Need space in Koramangala", EntityType.BRAND) == {"location": "Koramangala"}


def test_full_brand_brief():
    details = extract_details(
        "Looking for 1000-2000 sqft in Indiranagar with budget 2 lakhs", EntityType.BRAND
    )
    assert details == {"location": "Indiranagar", "size": 1000, "budget": 200000}


def test_bare_number_is_size_when_size_was_asked():
    assert extract_details("800", EntityType.OWNER, Slot.SIZE) == {"size": 800}


def test_bare_number_is_rent_when_rent_was_asked():
    assert extract_details("50", EntityType.OWNER, Slot.RENT) == {"rent": 50000}


def test_bare_number_without_context_is_ignored():
    assert extract_details("800", EntityType.OWNER) == {}


def test_money_goes_to_budget_for_brands():
    assert extract_details("1.5 lakh", EntityType.BRAND, Slot.BUDGET) == {"budget": 150000}
    assert extract_details("₹80k", EntityType.BRAND) == {"budget": 80000}


def test_labelled_rent():
    assert extract_details("rent: 45000", EntityType.OWNER) == {"rent": 45000}


def test_grouped_digits_in_money_reply():
    assert extract_details("Rs 1,20,000", EntityType.BRAND, Slot.BUDGET) == {"budget": 120000}


def test_number_words_in_money_reply():
    assert extract_details("fifty", EntityType.BRAND, Slot.BUDGET) == {"budget": 50000}


def test_square_metres_convert_to_sqft():
    assert extract_details("about 50 sq m", EntityType.OWNER) == {"size": 538}


def test_whole_reply_is_location_only_when_asked():
    assert extract_details("Kothrud, Pune", EntityType.OWNER, Slot.LOCATION) == {"location": "Kothrud, Pune"}
    assert extract_details("Kothrud, Pune", EntityType.OWNER) == {}


def test_size_reply_does_not_overwrite_location():
    assert extract_details("800 sqft at ground floor", EntityType.OWNER, Slot.SIZE) == {"size": 800}


def test_city_and_area_reply_keeps_the_area():
    assert extract_details("Bangalore, Koramangala", EntityType.OWNER, Slot.LOCATION) == {
        "location": "Koramangala"
    }


def test_undetermined_entity_extracts_nothing():
    assert extract_details("Need space in Koramangala", EntityType.UNDETERMINED) == {}


def test_size_rules_on_their_own():
    assert apply_rules(SIZE_RULES, "1000 to 1500 sqft", QuestionContext()) == {"size": 1000}
    assert apply_rules(SIZE_RULES, "1200 sq ft", QuestionContext()) == {"size": 1200}
    assert apply_rules(SIZE_RULES, "1200", QuestionContext()) == {}


def test_infer_pending_slot_from_last_question():
    rent_q = [Turn(role="assistant", content="What's the monthly rent you're expecting for this property?")]
    assert infer_pending_slot(rent_q, EntityType.OWNER) == Slot.RENT
    assert infer_pending_slot(rent_q, EntityType.BRAND) == Slot.BUDGET

    where_q = [Turn(role="assistant", content="Where is your property located? (Please share the city and area)")]
    assert infer_pending_slot(where_q, EntityType.OWNER) == Slot.LOCATION

    size_q = [Turn(role="assistant", content="What's the size of your property?")]
    assert infer_pending_slot(size_q, EntityType.OWNER) == Slot.SIZE

    assert infer_pending_slot([], EntityType.OWNER) is None


def test_numeric_reply():
    assert numeric_reply("50,000") == 50000
    assert numeric_reply("₹ 800") == 800
    assert numeric_reply("twenty five") == 25
    assert numeric_reply("two lakh") is None
    assert numeric_reply("hello") is None
    assert numeric_reply("and") is None


def test_clean_location():
    assert clean_location("the Koramangala") == "Koramangala"
    assert clean_location("good space") is None
    assert clean_location("123") is None
    assert clean_location("kothrud near the station") == "Kothrud"


def test_budget_range_keeps_lower_bound_in_any_notation():
    assert extract_details("₹50k - ₹1 lakh", EntityType.BRAND, Slot.BUDGET) == {"budget": 50000}
    assert extract_details("₹50,000 - ₹1,00,000", EntityType.BRAND, Slot.BUDGET) == {"budget": 50000}
    assert extract_details("50k to 1 lakh", EntityType.BRAND) == {"budget": 50000}
    assert extract_details("2-3 lakh", EntityType.OWNER) == {"rent": 200000}


def test_size_and_budget_ranges_together():
    details = extract_details("500-1000 sqft, budget 50k-1 lakh", EntityType.BRAND)
    assert details == {"size": 500, "budget": 50000}


def test_labelled_size_without_unit():
    assert extract_details("size is 1200", EntityType.OWNER) == {"size": 1200}


def test_overlong_numbers_are_not_values():
    assert numeric_reply("9" * 5000) is None
    assert numeric_reply("nine " * 20) is None
    assert extract_details("9" * 5000, EntityType.OWNER, Slot.RENT) == {}
    assert extract_details("9" * 5000, EntityType.OWNER, Slot.SIZE) == {}


def test_long_digit_runs_scan_in_linear_time():
    started = time.perf_counter()
    assert extract_details("1" * 20000 + " x", EntityType.OWNER) == {}
    assert time.perf_counter() - started < 1.0


def test_phrases_after_prepositions_are_not_locations():
    assert extract_details("brand interested in opening an outlet", EntityType.BRAND) == {}
    assert extract_details("looking for something affordable", EntityType.BRAND) == {}
    assert extract_details("shop is in good condition", EntityType.OWNER) == {}


def test_resolve_references():
    assert resolve_references("same location as before", Slot.LOCATION, {"location": "Koramangala"}) == "Koramangala as before"
    assert resolve_references("same size please", None, {"size": 800}) == "800 sqft please"
    assert resolve_references("make it 1200", Slot.SIZE, {}) == "make size 1200"
    assert resolve_references("make it 1200", None, {}) == "make it 1200"
