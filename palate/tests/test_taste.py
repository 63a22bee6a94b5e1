from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from palate.models.dish import Dish
from palate.models.user import User
from palate.schema.taste import TasteProfileInput, TasteScale, TasteVector
from palate.services import taste_service

NEUTRAL = {"sweet": 0.5, "salty": 0.5, "sour": 0.5, "bitter": 0.5, "umami": 0.5, "spicy": 0.5}


def test_five_point_values_convert_to_unit_scale():
    vector = TasteVector.from_scale(
        {"sweet": 1, "salty": 2, "sour": 3, "bitter": 4, "umami": 5, "spicy": 3},
        TasteScale.FIVE_POINT,
    )
    assert vector.sweet == 0.0
    assert vector.salty == 0.25
    assert vector.sour == 0.5
    assert vector.bitter == 0.75
    assert vector.umami == 1.0


@pytest.mark.parametrize(
    "values, scale",
    [
        ({**NEUTRAL, "spicy": 1.5}, TasteScale.UNIT),
        ({**NEUTRAL, "sweet": -0.1}, TasteScale.UNIT),
        ({**NEUTRAL, "sweet": 0}, TasteScale.FIVE_POINT),
        ({**NEUTRAL, "umami": 6}, TasteScale.FIVE_POINT),
    ],
)
def test_out_of_range_values_are_rejected(values, scale):
    with pytest.raises(ValueError):
        TasteVector.from_scale(values, scale)


def test_missing_axis_is_rejected():
    values = dict(NEUTRAL)
    values.pop("bitter")
    with pytest.raises(ValueError, match="bitter"):
        TasteVector.from_scale(values)


def test_direct_construction_enforces_canonical_range():
    with pytest.raises(ValidationError):
        TasteVector(sweet=3, salty=0, sour=0, bitter=0, umami=0, spicy=0)


def test_display_rounds_to_ten_pips():
    vector = TasteVector(sweet=0.84, salty=0.0, sour=0.25, bitter=1.0, umami=0.5, spicy=0.06)
    assert vector.display() == {"sweet": 8, "salty": 0, "sour": 2, "bitter": 10, "umami": 5, "spicy": 1}


def test_profile_input_rejects_values_outside_its_scale():
    with pytest.raises(ValidationError):
        TasteProfileInput(scale="five_point", sweet=0, salty=1, sour=1, bitter=1, umami=1, spicy=1)
    converted = TasteProfileInput(scale="five_point", sweet=5, salty=1, sour=1, bitter=1, umami=1, spicy=1)
    assert converted.to_vector().sweet == 1.0


def test_similarity_is_one_for_identical_vectors():
    vector = TasteVector(**NEUTRAL)
    assert taste_service.similarity(vector, vector) == 1.0


def test_similarity_is_symmetric_and_bounded():
    a = TasteVector(sweet=1, salty=0, sour=0.5, bitter=0.2, umami=0.9, spicy=0)
    b = TasteVector(sweet=0, salty=1, sour=0.5, bitter=0.8, umami=0.1, spicy=1)
    forward = taste_service.similarity(a, b)
    assert forward == pytest.approx(taste_service.similarity(b, a))
    assert 0.0 <= forward <= 1.0
    # mean |a - b| = (1 + 1 + 0 + 0.6 + 0.8 + 1) / 6 = 0.7333...
    assert forward == pytest.approx(1 - 4.4 / 6)


def test_opposite_vectors_have_zero_similarity():
    low = TasteVector(sweet=0, salty=0, sour=0, bitter=0, umami=0, spicy=0)
    high = TasteVector(sweet=1, salty=1, sour=1, bitter=1, umami=1, spicy=1)
    assert taste_service.similarity(low, high) == 0.0
    assert taste_service.match_percent(low, high) == 0
    assert taste_service.match_percent(high, high) == 100


def test_dish_match_reports_the_same_percent_as_match_percent():
    user_taste = {**NEUTRAL, "spicy": 0.9, "sweet": 0.123}
    dish_taste = {**NEUTRAL, "spicy": 0.2}
    user = User(email="match@example.com", hashed_password="x", taste_profile=user_taste)
    dish = Dish(id=uuid.uuid4(), name="Mapo tofu", taste_profile=dish_taste)

    match = taste_service.dish_match(user, dish)

    expected = taste_service.match_percent(TasteVector(**user_taste), TasteVector(**dish_taste))
    assert match.match_percent == expected
    assert match.similarity == pytest.approx(taste_service.similarity(TasteVector(**user_taste), TasteVector(**dish_taste)))


def test_dish_match_is_empty_without_both_profiles():
    user = User(email="blank@example.com", hashed_password="x", taste_profile=None)
    dish = Dish(id=uuid.uuid4(), name="Plain rice", taste_profile=NEUTRAL)

    match = taste_service.dish_match(user, dish)

    assert match.match_percent is None
    assert match.similarity is None
