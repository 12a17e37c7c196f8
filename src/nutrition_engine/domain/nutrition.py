"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionValues:
    """Absolute macro values for a serving, meal, or day."""

    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class NutritionTargets:
    """Daily macro targets declared by a plan author."""

    calories: float | None
    protein_grams: float | None
    carbohydrate_grams: float | None
    fat_grams: float | None
