"""Unit conversion table for food quantities."""

from enum import Enum

from nutrition_engine.errors import UnsupportedUnitError

DEFAULT_SERVING_SIZE_G = 100.0
SERVING_UNIT = "serving"

# Gram equivalent of one unit. Volumes assume the density of water.
GRAMS_PER_UNIT: dict[str, float] = {
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.35,
    "lb": 453.59,
    "ml": 1.0,
    "l": 1000.0,
    "cup": 240.0,
    "tbsp": 15.0,
    "tsp": 5.0,
}

# Units whose macros can be derived from weight alone when logging extra meals.
WEIGHT_UNITS = frozenset({"g", "oz"})


class UnknownUnitPolicy(str, Enum):
    """What to do with a unit missing from the table."""

    TREAT_AS_GRAMS = "treat-as-grams"
    REJECT = "reject"


UNKNOWN_UNIT_POLICY = UnknownUnitPolicy.TREAT_AS_GRAMS


def normalize_unit(unit: str | None) -> str:
    """Return the lookup key for a free-form unit string."""
    return (unit or "").strip().lower()


def is_known_unit(unit: str | None) -> bool:
    """Return whether a unit is in the conversion table."""
    key = normalize_unit(unit)
    return key == SERVING_UNIT or key in GRAMS_PER_UNIT


def is_weight_unit(unit: str | None) -> bool:
    """Return whether macros for the unit can be computed from grams."""
    return normalize_unit(unit) in WEIGHT_UNITS


def to_grams(
    quantity: float,
    unit: str | None,
    serving_size_g: float | None = None,
    policy: UnknownUnitPolicy = UNKNOWN_UNIT_POLICY,
) -> float:
    """Convert a quantity in the given unit to a gram equivalent."""
    key = normalize_unit(unit)
    if key == SERVING_UNIT:
        return (serving_size_g or DEFAULT_SERVING_SIZE_G) * quantity
    factor = GRAMS_PER_UNIT.get(key)
    if factor is not None:
        return quantity * factor
    if policy is UnknownUnitPolicy.REJECT:
        raise UnsupportedUnitError(str(unit))
    return quantity
