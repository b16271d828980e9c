"""
Unit helpers: canonical spellings, unit groups and same-group conversion.

Every group converts through a fixed base unit (grams for mass, milliliters
for volume; count and time are their own base). Conversion is plain
multiplicative scaling; rounding is left to callers.
"""

import math
from enum import Enum

from growledger.config import get_logger
from growledger.core.exceptions import IncompatibleUnitsError

logger = get_logger(__name__)


class UnitGroup(str, Enum):
    """Families of units that can be converted into one another."""

    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"
    TIME = "time"
    OTHER = "other"


# Canonical unit -> factor into the group's base unit
MASS_UNITS: dict[str, float] = {
    "mg": 0.001,
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.349523125,
    "lbs": 453.59237,
}
VOLUME_UNITS: dict[str, float] = {
    "ml": 1.0,
    "liter": 1000.0,
}
COUNT_UNITS: dict[str, float] = {"count": 1.0}
TIME_UNITS: dict[str, float] = {"hour": 1.0}

_GROUPS: dict[UnitGroup, dict[str, float]] = {
    UnitGroup.MASS: MASS_UNITS,
    UnitGroup.VOLUME: VOLUME_UNITS,
    UnitGroup.COUNT: COUNT_UNITS,
    UnitGroup.TIME: TIME_UNITS,
}

SYNONYMS: dict[str, str] = {
    # mass
    "lb": "lbs",
    "pound": "lbs",
    "pounds": "lbs",
    "ounce": "oz",
    "ounces": "oz",
    "gram": "g",
    "grams": "g",
    "kilogram": "kg",
    "kilograms": "kg",
    "milligram": "mg",
    "milligrams": "mg",
    # volume
    "l": "liter",
    "litre": "liter",
    "litres": "liter",
    "liters": "liter",
    "milliliter": "ml",
    "milliliters": "ml",
    "millilitre": "ml",
    "millilitres": "ml",
    "cc": "ml",
    # count, including the container words operators type as units
    "ea": "count",
    "each": "count",
    "unit": "count",
    "units": "count",
    "qty": "count",
    "pc": "count",
    "pcs": "count",
    "piece": "count",
    "pieces": "count",
    "item": "count",
    "items": "count",
    "jar": "count",
    "jars": "count",
    "dish": "count",
    "dishes": "count",
    "plate": "count",
    "plates": "count",
    "tray": "count",
    "trays": "count",
    "tub": "count",
    "tubs": "count",
    # time
    "hours": "hour",
    "hr": "hour",
    "hrs": "hour",
}


def canonicalize(unit: str | None) -> str:
    """Map a free-text unit spelling to its canonical form.

    Unknown spellings come back trimmed and lower-cased; they land in
    ``UnitGroup.OTHER``.
    """
    if not unit:
        return ""
    key = str(unit).strip().lower()
    return SYNONYMS.get(key, key)


def group_of(unit: str | None) -> UnitGroup:
    """Return the group a unit belongs to."""
    cu = canonicalize(unit)
    for group, units in _GROUPS.items():
        if cu in units:
            return group
    return UnitGroup.OTHER


def is_count_unit(unit: str | None) -> bool:
    return group_of(unit) is UnitGroup.COUNT


def are_compatible(a: str | None, b: str | None) -> bool:
    """True when both units share a group."""
    return group_of(a) == group_of(b)


def convert(
    amount: float,
    from_unit: str | None,
    to_unit: str | None,
    strict: bool = False,
) -> float:
    """
    Convert an amount between units of the same group.

    Cross-group conversions return the amount unchanged unless ``strict`` is
    set, in which case IncompatibleUnitsError is raised. A blank unit on
    either side also returns the amount unchanged.
    """
    value = float(amount)
    src = canonicalize(from_unit)
    dst = canonicalize(to_unit)
    if not src or not dst or src == dst:
        return value

    src_group = group_of(src)
    if src_group != group_of(dst):
        if strict:
            raise IncompatibleUnitsError(src, dst)
        logger.warning(
            "unit_group_mismatch",
            from_unit=src,
            to_unit=dst,
            amount=value,
        )
        return value

    factors = _GROUPS.get(src_group)
    if factors is None:
        # Two distinct "other" units: nothing to scale by
        return value
    return value * factors[src] / factors[dst]


def format_amount(n: float | None) -> str:
    """Format an amount for display with magnitude-dependent precision."""
    try:
        v = float(n)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return "0"
    if not math.isfinite(v):
        return "0"
    magnitude = abs(v)
    if magnitude >= 100:
        fixed = f"{v:.0f}"
    elif magnitude >= 10:
        fixed = f"{v:.1f}"
    else:
        fixed = f"{v:.2f}"
    if "." in fixed:
        fixed = fixed.rstrip("0").rstrip(".")
    return fixed
