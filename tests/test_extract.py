"""Unit tests for duration/distance extraction and the pace-based estimate."""

from healthlog.extract import estimate_duration, extract, extract_distance, extract_duration


def test_minutes():
    assert extract_duration("did pilates for 45 minutes") == 45


def test_min_abbreviation_case_insensitive():
    assert extract_duration("Bike 20 MIN easy") == 20


def test_hours_converted_to_minutes():
    assert extract_duration("hiked for 2 hours") == 120
    assert extract_duration("1 hr of yoga") == 60


def test_decimal_hours_rounded():
    assert extract_duration("rode 1.5 hours") == 90


def test_first_duration_wins():
    assert extract_duration("30 minutes run then 10 minutes walk") == 30


def test_no_duration():
    assert extract_duration("I ran") is None


def test_distance_miles_verbatim():
    assert extract_distance("I ran 5 miles today") == "5 miles"


def test_distance_decimal_km():
    assert extract_distance("jogged 3.5 km") == "3.5 km"


def test_distance_k_suffix():
    assert extract_distance("I went for a 5k run which took me about 30 minutes") == "5k"


def test_kg_is_not_a_distance():
    assert extract_distance("lifted 40 kg") is None


def test_extract_both_fields():
    assert extract("I went for a 5k run which took me about 30 minutes") == {
        "duration_minutes": 30,
        "distance": "5k",
    }


def test_extract_empty_and_none():
    assert extract("") == {"duration_minutes": None, "distance": None}
    assert extract(None) == {"duration_minutes": None, "distance": None}


def test_extract_is_pure():
    text = "cycled 12 miles in 1 hour"
    assert extract(text) == extract(text)


def test_estimate_running_pace():
    assert estimate_duration("5 miles") == 50
    assert estimate_duration("5 miles", "running") == 50


def test_estimate_km_converted():
    # 5 km = 3.107 mi at 10 min/mi
    assert estimate_duration("5k") == 31


def test_estimate_walking_pace():
    assert estimate_duration("2 miles", "walking") == 40


def test_estimate_unparseable():
    assert estimate_duration("far") is None
    assert estimate_duration("") is None
