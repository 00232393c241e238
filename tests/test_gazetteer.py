from intake_agent.services.gazetteer import canonical_name, find_location


def test_misspelling_resolves_to_official_name():
    location = find_location("shop near koramangla")
    assert location is not None
    assert location.official == "Koramangala"


def test_longest_variation_wins():
    assert find_location("hsr layout sector 2").official == "HSR Layout"


def test_neighbourhood_beats_city():
    assert find_location("Bangalore, Koramangala").official == "Koramangala"
    assert find_location("somewhere in bengaluru").official == "Bangalore"


def test_unknown_text():
    assert find_location("nothing to see") is None
    assert canonical_name("indira nagar") == "Indiranagar"
    assert canonical_name("Kothrud") is None
