"""Tests for the vehicle catalog lookups."""

from deal_analyzer.services.vehicle_catalog import (
    DEFAULT_BASE_PRICE,
    MAKES,
    MODELS_BY_MAKE,
    base_price_for,
    canonical_make,
    find_make,
    find_model,
    is_desirable_location,
    reliability_score,
)


def test_every_make_has_models():
    assert set(MAKES) == set(MODELS_BY_MAKE)


def test_find_make_matches_start_of_word():
    assert find_make("2017 Ford Focus") == "Ford"
    assert find_make("Affordable commuter") is None
    assert find_make("used chevy silverado") == "Chevrolet"
    assert find_make("land-rover-defender-110") == "Land Rover"
    assert find_make("2021-mazda3-hatchback") == "Mazda"
    assert find_make("2019-fordf150-xlt") == "Ford"


def test_find_model_separator_insensitive():
    assert find_model("honda_cr-v_touring", "Honda") == "CR-V"
    assert find_model("2019 Honda CRV", "Honda") == "CR-V"
    assert find_model("tesla model-3 long range", "Tesla") == "Model 3"
    assert find_model("mystery", "Honda") is None


def test_find_model_glued_to_make():
    assert find_model("2019-fordf150-xlt", "Ford") == "F-150"
    assert find_model("2021-mazda3-hatchback", "Mazda") == "Mazda3"
    assert find_model("used hondacivic", "Honda") == "Civic"


def test_canonical_make():
    assert canonical_make("bmw") == "BMW"
    assert canonical_make("VW") == "Volkswagen"
    assert canonical_make("Koenigsegg") == "Koenigsegg"
    assert canonical_make("") is None


def test_base_price():
    assert base_price_for("Ford", "F-150") == 45000
    assert base_price_for("Tesla", "Model 3") == DEFAULT_BASE_PRICE


def test_reliability_score():
    assert reliability_score("Lexus") == 9
    assert reliability_score("HONDA") == 8
    assert reliability_score(None) == 5
    assert reliability_score("Lamborghini") == 5


def test_desirable_location():
    assert is_desirable_location("San Francisco Bay Area")
    assert not is_desirable_location("Unknown Location")
    assert not is_desirable_location(None)
