"""Meal split of daily macro targets and percentage rebalancing."""

import math
from collections.abc import Sequence

from nutrition_engine.domain.errors import (
    FieldError,
    ValidationError,
    invariant,
    missing,
    out_of_range,
)
from nutrition_engine.domain.macros import (
    MacroDefinition,
    MealDistribution,
    MealSlot,
    MealTarget,
)

MIN_MEALS = 1
MAX_MEALS = 6
SUM_TOLERANCE = 0.1
SLOT_COUNT_MESSAGE = f"between {MIN_MEALS} and {MAX_MEALS} meal slots supported"

THREE_MEALS = (
    MealSlot("breakfast", 25.0),
    MealSlot("lunch", 35.0),
    MealSlot("dinner", 40.0),
)

SIX_MEALS = (
    MealSlot("breakfast", 25.0),
    MealSlot("morning_snack", 10.0),
    MealSlot("lunch", 30.0),
    MealSlot("afternoon_snack", 10.0),
    MealSlot("dinner", 20.0),
    MealSlot("supper", 5.0),
)

MEAL_TEMPLATES: dict[int, tuple[MealSlot, ...]] = {3: THREE_MEALS, 6: SIX_MEALS}


def meal_template(count: int) -> tuple[MealSlot, ...]:
    """Return the default slots for a number of meals.

    Counts without a clinical template get an even split.
    """
    if not MIN_MEALS <= count <= MAX_MEALS:
        raise ValidationError([out_of_range("meals", SLOT_COUNT_MESSAGE)])
    if count in MEAL_TEMPLATES:
        return MEAL_TEMPLATES[count]
    return tuple(MealSlot(f"meal_{n}", 100.0 / count) for n in range(1, count + 1))


def validate_slots(
    slots: Sequence[MealSlot], tolerance: float = SUM_TOLERANCE
) -> list[FieldError]:
    """Return every problem with a set of meal slots."""
    if not MIN_MEALS <= len(slots) <= MAX_MEALS:
        return [out_of_range("meals", SLOT_COUNT_MESSAGE)]

    errors: list[FieldError] = []
    for position, slot in enumerate(slots):
        if not slot.name.strip():
            errors.append(missing(f"meals[{position}].name", "meal name required"))
        for label, share in _columns(slot):
            if not 0 <= share <= 100:
                errors.append(
                    out_of_range(
                        f"meals[{position}].{label}",
                        "percentage must be between 0 and 100",
                    )
                )

    columns = {"percentage": [slot.percentage for slot in slots]}
    for label, share in (
        ("protein_percentage", lambda slot: slot.protein_share),
        ("fat_percentage", lambda slot: slot.fat_share),
        ("carb_percentage", lambda slot: slot.carb_share),
    ):
        if any(getattr(slot, label) is not None for slot in slots):
            columns[label] = [share(slot) for slot in slots]
    for label, shares in columns.items():
        total = math.fsum(shares)
        if abs(total - 100) > tolerance:
            errors.append(
                invariant(
                    f"meals.{label}",
                    f"meal percentages sum to {total:.2f}%, must equal 100%",
                )
            )
    return errors


def split_meals(
    definition: MacroDefinition,
    slots: Sequence[MealSlot],
    tolerance: float = SUM_TOLERANCE,
) -> MealDistribution:
    """Split the daily prescription across meal slots by percentage."""
    errors = validate_slots(slots, tolerance)
    if errors:
        raise ValidationError(errors)

    meals = tuple(
        MealTarget(
            name=slot.name,
            percentage=slot.percentage,
            protein_g=definition.protein.grams * slot.protein_share / 100,
            fat_g=definition.fat.grams * slot.fat_share / 100,
            carbs_g=definition.carbs.grams * slot.carb_share / 100,
        )
        for slot in slots
    )
    return MealDistribution(
        meals=meals,
        total_protein_g=definition.protein.grams,
        total_fat_g=definition.fat.grams,
        total_carbs_g=definition.carbs.grams,
    )


def rebalance(
    percentages: Sequence[float],
    index: int,
    value: float,
    linked: int | None = None,
    tolerance: float = SUM_TOLERANCE,
) -> tuple[float, ...]:
    """Set one share and redistribute the difference so the total stays 100.

    Works for any set of shares summing to 100, meal slots or macro
    percentages alike. When ``linked`` is given that slot absorbs the
    difference first, within [0, 100]. Whatever is left goes to the remaining
    slots in proportion to their current shares, or evenly when they are all
    zero.
    """
    shares = [float(share) for share in percentages]
    count = len(shares)
    errors: list[FieldError] = []
    invalid_shares = [
        out_of_range(
            f"percentages[{position}]", "percentage must be between 0 and 100"
        )
        for position, share in enumerate(shares)
        if not 0 <= share <= 100
    ]
    if not MIN_MEALS <= count <= MAX_MEALS:
        errors.append(out_of_range("percentages", SLOT_COUNT_MESSAGE))
    elif invalid_shares:
        errors.extend(invalid_shares)
    elif abs(math.fsum(shares) - 100) > tolerance:
        errors.append(
            invariant("percentages", "percentages must sum to 100 before editing")
        )
    if not 0 <= index < count:
        errors.append(out_of_range("index", "slot index out of range"))
    if not 0 <= value <= 100:
        errors.append(out_of_range("value", "percentage must be between 0 and 100"))
    if linked is not None and (not 0 <= linked < count or linked == index):
        errors.append(
            out_of_range("linked", "linked slot must be another existing slot")
        )
    if errors:
        raise ValidationError(errors)
    if count == 1:
        if not math.isclose(value, 100.0):
            raise ValidationError([invariant("value", "a single slot must hold 100%")])
        return (100.0,)

    remainder = shares[index] - value
    shares[index] = value
    receivers = [position for position in range(count) if position != index]

    if linked is not None:
        absorbed = min(max(shares[linked] + remainder, 0.0), 100.0)
        remainder -= absorbed - shares[linked]
        shares[linked] = absorbed
        receivers.remove(linked)

    if receivers and not math.isclose(remainder, 0.0, abs_tol=1e-12):
        _spread(shares, receivers, remainder)

    residue = 100.0 - math.fsum(shares)
    if residue:
        adjustable = [p for p in range(count) if p != index]
        largest = max(adjustable, key=lambda position: shares[position])
        shares[largest] += residue
    return tuple(shares)


def _spread(shares: list[float], receivers: list[int], amount: float) -> None:
    pool = math.fsum(shares[position] for position in receivers)
    if pool <= 0:
        for position in receivers:
            shares[position] += amount / len(receivers)
        return
    for position in receivers:
        shares[position] += amount * shares[position] / pool


def _columns(slot: MealSlot) -> list[tuple[str, float]]:
    columns = [("percentage", slot.percentage)]
    for label in ("protein_percentage", "fat_percentage", "carb_percentage"):
        override = getattr(slot, label)
        if override is not None:
            columns.append((label, override))
    return columns
