"""Taste-vector similarity between users and dishes."""

from __future__ import annotations

import numpy as np

from palate.models.dish import Dish
from palate.models.user import User
from palate.schema.dish import TasteMatchRead
from palate.schema.taste import TasteVector


def similarity(a: TasteVector, b: TasteVector) -> float:
    """``1 - mean |a - b|`` over the six axes; 1.0 for identical vectors."""
    return float(1.0 - np.abs(a.as_array() - b.as_array()).mean())


def match_percent(a: TasteVector, b: TasteVector) -> int:
    return int(round(similarity(a, b) * 100))


def dish_match(user: User, dish: Dish) -> TasteMatchRead:
    """Compare the user's taste vector with the dish's, when both exist."""
    user_vector = TasteVector.from_stored(user.taste_profile)
    dish_vector = TasteVector.from_stored(dish.taste_profile)
    if user_vector is None or dish_vector is None:
        return TasteMatchRead(dish_id=dish.id)
    return TasteMatchRead(
        dish_id=dish.id,
        similarity=similarity(user_vector, dish_vector),
        match_percent=match_percent(user_vector, dish_vector),
    )
