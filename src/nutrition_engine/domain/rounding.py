"""Display rounding applied only at output boundaries."""

from decimal import ROUND_HALF_UP, Decimal

KCAL_PLACES = 0
GRAM_PLACES = 1
PERCENT_PLACES = 1
DENSITY_PLACES = 6
BODY_FAT_PLACES = 2
MASS_PLACES = 2


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero, avoiding binary float artefacts."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def kcal(value: float) -> int:
    return int(round_half_up(value, KCAL_PLACES))


def grams(value: float) -> float:
    return round_half_up(value, GRAM_PLACES)


def percent(value: float) -> float:
    return round_half_up(value, PERCENT_PLACES)
