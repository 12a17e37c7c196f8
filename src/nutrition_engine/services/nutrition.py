"""Macro calculation for food servings."""

import math
from collections.abc import Iterable

from nutrition_engine.domain.foods import FoodItem
from nutrition_engine.domain.nutrition import NutritionValues
from nutrition_engine.services.units import (
    UNKNOWN_UNIT_POLICY,
    UnknownUnitPolicy,
    to_grams,
)


def calculate_nutrition(
    food_item: FoodItem,
    quantity: float,
    unit: str,
    policy: UnknownUnitPolicy = UNKNOWN_UNIT_POLICY,
) -> NutritionValues:
    """Return macros for a quantity of a food item.

    The quantity is converted to grams and scaled against the per-100g values.
    Calories are rounded to whole numbers and the other macros to one decimal
    place, field by field.
    """
    if quantity <= 0:
        return NutritionValues(0.0, 0.0, 0.0, 0.0)
    grams = to_grams(quantity, unit, food_item.serving_size_g, policy)
    multiplier = grams / 100.0
    return NutritionValues(
        calories=_round_half_up(_per_100g(food_item.calories_per_100g) * multiplier),
        protein=_round_half_up(_per_100g(food_item.protein_per_100g) * multiplier, 1),
        carbs=_round_half_up(_per_100g(food_item.carbs_per_100g) * multiplier, 1),
        fat=_round_half_up(_per_100g(food_item.fat_per_100g) * multiplier, 1),
    )


def line_nutrition(
    food_item: FoodItem | None,
    quantity: float,
    unit: str,
    override: NutritionValues | None = None,
) -> NutritionValues:
    """Return macros for a meal line, preferring explicit overrides."""
    if override is not None:
        return override
    if food_item is None:
        return NutritionValues(0.0, 0.0, 0.0, 0.0)
    return calculate_nutrition(food_item, quantity, unit)


def sum_nutrition(values: Iterable[NutritionValues]) -> NutritionValues:
    """Add nutrition values in order without re-rounding."""
    total = NutritionValues(0.0, 0.0, 0.0, 0.0)
    for value in values:
        total = NutritionValues(
            calories=total.calories + value.calories,
            protein=total.protein + value.protein,
            carbs=total.carbs + value.carbs,
            fat=total.fat + value.fat,
        )
    return total


def subtract_nutrition(
    minuend: NutritionValues, subtrahend: NutritionValues
) -> NutritionValues:
    """Return the field-wise difference of two nutrition values."""
    return NutritionValues(
        calories=minuend.calories - subtrahend.calories,
        protein=minuend.protein - subtrahend.protein,
        carbs=minuend.carbs - subtrahend.carbs,
        fat=minuend.fat - subtrahend.fat,
    )


def _per_100g(value: float | None) -> float:
    return float(value) if value else 0.0


def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale
