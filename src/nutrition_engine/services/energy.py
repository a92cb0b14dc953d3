"""Basal metabolic rate selection and energy target adjustment.

By default the formula follows the profile classification, not BMI:

- lean: Harris-Benedict revised (Roza & Shizgal, 1984)
- overweight/obese: Mifflin-St Jeor (1990)
- athlete: Tinsley weight-based estimate (2019)

A profile may name another formula instead: Owen (1986/1987), Schofield
(1985), or the lean-mass equations Katch-McArdle and Cunningham (1980), which
take body-fat percentage, for instance from a skinfold assessment.

GET is BMR times the activity factor and VET is GET adjusted for the caloric
objective. Nothing here rounds; rounding belongs to ``display()``.
"""

import math
from dataclasses import dataclass
from typing import assert_never

from nutrition_engine.domain.energy import (
    ActivityLevel,
    BmrFormula,
    BmrResult,
    EnergyCalculation,
    FloorPolicy,
    Objective,
)
from nutrition_engine.domain.errors import (
    ErrorKind,
    ValidationError,
    invariant,
    missing,
    out_of_range,
)
from nutrition_engine.domain.profile import Profile, ProfileType, Sex

BMR_PER_KG_MIN = 15.0
BMR_PER_KG_MAX = 35.0
TINSLEY_KCAL_PER_KG = 22.0
PROFILE_INPUTS_MESSAGE = "height/age required for this profile"

DEFAULT_FORMULA: dict[ProfileType, BmrFormula] = {
    ProfileType.LEAN: BmrFormula.HARRIS_BENEDICT,
    ProfileType.OVERWEIGHT_OBESE: BmrFormula.MIFFLIN_ST_JEOR,
    ProfileType.ATHLETE: BmrFormula.TINSLEY,
}

# Profile fields each formula needs besides weight and sex.
FORMULA_INPUTS: dict[BmrFormula, tuple[str, ...]] = {
    BmrFormula.HARRIS_BENEDICT: ("height", "age"),
    BmrFormula.MIFFLIN_ST_JEOR: ("height", "age"),
    BmrFormula.TINSLEY: (),
    BmrFormula.OWEN: (),
    BmrFormula.KATCH_MCARDLE: ("body_fat_percentage",),
    BmrFormula.CUNNINGHAM: ("body_fat_percentage",),
    BmrFormula.SCHOFIELD: ("age",),
}


@dataclass(frozen=True)
class LinearCoefficients:
    """Coefficients of ``intercept + w*weight + h*height - a*age``."""

    intercept: float
    weight: float
    height: float = 0.0
    age: float = 0.0

    def apply(self, weight: float, height: float = 0.0, age: float = 0.0) -> float:
        return (
            self.intercept
            + self.weight * weight
            + self.height * height
            - self.age * age
        )


HARRIS_BENEDICT_REVISED: dict[Sex, LinearCoefficients] = {
    Sex.MALE: LinearCoefficients(intercept=88.36, weight=13.4, height=4.8, age=5.7),
    Sex.FEMALE: LinearCoefficients(intercept=447.6, weight=9.25, height=3.1, age=4.33),
}

MIFFLIN_ST_JEOR: dict[Sex, LinearCoefficients] = {
    Sex.MALE: LinearCoefficients(intercept=5.0, weight=10.0, height=6.25, age=5.0),
    Sex.FEMALE: LinearCoefficients(intercept=-161.0, weight=10.0, height=6.25, age=5.0),
}

OWEN: dict[Sex, LinearCoefficients] = {
    Sex.MALE: LinearCoefficients(intercept=879.0, weight=10.2),
    Sex.FEMALE: LinearCoefficients(intercept=795.0, weight=7.18),
}

# Applied to lean body mass instead of weight.
LEAN_MASS: dict[BmrFormula, LinearCoefficients] = {
    BmrFormula.KATCH_MCARDLE: LinearCoefficients(intercept=370.0, weight=21.6),
    BmrFormula.CUNNINGHAM: LinearCoefficients(intercept=500.0, weight=22.0),
}

# (upper age bound, coefficients) in ascending age order.
SCHOFIELD: dict[Sex, tuple[tuple[float, LinearCoefficients], ...]] = {
    Sex.MALE: (
        (3, LinearCoefficients(intercept=-54.0, weight=60.9)),
        (10, LinearCoefficients(intercept=495.0, weight=22.7)),
        (18, LinearCoefficients(intercept=651.0, weight=17.5)),
        (30, LinearCoefficients(intercept=679.0, weight=15.3)),
        (60, LinearCoefficients(intercept=879.0, weight=11.6)),
        (math.inf, LinearCoefficients(intercept=487.0, weight=13.5)),
    ),
    Sex.FEMALE: (
        (3, LinearCoefficients(intercept=-51.0, weight=61.0)),
        (10, LinearCoefficients(intercept=499.0, weight=22.5)),
        (18, LinearCoefficients(intercept=746.0, weight=12.2)),
        (30, LinearCoefficients(intercept=496.0, weight=14.7)),
        (60, LinearCoefficients(intercept=829.0, weight=8.7)),
        (math.inf, LinearCoefficients(intercept=596.0, weight=10.5)),
    ),
}


@dataclass(frozen=True)
class EnergyPolicy:
    """Objective defaults and the weight-loss safety floor."""

    minimum_vet_kcal: float = 1200.0
    floor_policy: FloorPolicy = FloorPolicy.REJECT
    weight_loss_deficit_kcal: float = 500.0
    hypertrophy_surplus_kcal: float = 400.0

    def default_adjustment(self, objective: Objective) -> float:
        """Return the adjustment used when the caller supplies none."""
        if objective is Objective.WEIGHT_LOSS:
            return self.weight_loss_deficit_kcal
        if objective is Objective.HYPERTROPHY:
            return self.hypertrophy_surplus_kcal
        return 0.0


def select_formula(
    profile_type: ProfileType, formula: BmrFormula | None = None
) -> BmrFormula:
    """Return the explicit formula, or the default for the profile type."""
    if formula is not None:
        return formula
    return DEFAULT_FORMULA[profile_type]


def missing_input_message(field: str, formula: BmrFormula | None = None) -> str:
    """Message for an input the selected formula cannot do without."""
    if formula is None:
        return PROFILE_INPUTS_MESSAGE
    return f"{field} required for the {formula.value} formula"


def calculate_bmr(profile: Profile) -> BmrResult:
    """Return BMR in kcal/day using the selected formula."""
    weight = profile.weight
    if weight is None:
        raise ValidationError([missing("weight", "weight required")])
    if weight <= 0:
        raise ValidationError(
            [out_of_range("weight", "weight must be greater than zero")]
        )

    formula = select_formula(profile.profile_type, profile.formula)
    absent = [
        missing(name, missing_input_message(name, profile.formula))
        for name in FORMULA_INPUTS[formula]
        if getattr(profile, name) is None
    ]
    if absent:
        raise ValidationError(absent)

    body_fat = profile.body_fat_percentage
    if body_fat is not None and not 0 < body_fat < 100:
        raise ValidationError(
            [
                out_of_range(
                    "body_fat_percentage",
                    "body fat percentage must be between 0 and 100",
                )
            ]
        )

    value = _apply_formula(formula, profile, weight)
    if value <= 0:
        raise ValidationError(
            [invariant("bmr", "anthropometric inputs produce a non-positive BMR")]
        )
    return BmrResult(value=value, formula=formula)


def _apply_formula(formula: BmrFormula, profile: Profile, weight: float) -> float:
    # Required inputs were checked against FORMULA_INPUTS by the caller.
    height = profile.height or 0.0
    age = profile.age or 0.0
    if formula is BmrFormula.HARRIS_BENEDICT:
        return HARRIS_BENEDICT_REVISED[profile.sex].apply(weight, height, age)
    elif formula is BmrFormula.MIFFLIN_ST_JEOR:
        return MIFFLIN_ST_JEOR[profile.sex].apply(weight, height, age)
    elif formula is BmrFormula.TINSLEY:
        return TINSLEY_KCAL_PER_KG * weight
    elif formula is BmrFormula.OWEN:
        return OWEN[profile.sex].apply(weight)
    elif formula is BmrFormula.KATCH_MCARDLE or formula is BmrFormula.CUNNINGHAM:
        lean_mass = weight * (1 - (profile.body_fat_percentage or 0.0) / 100)
        return LEAN_MASS[formula].apply(lean_mass)
    elif formula is BmrFormula.SCHOFIELD:
        coefficients = next(
            band for upper_age, band in SCHOFIELD[profile.sex] if age <= upper_age
        )
        return coefficients.apply(weight)
    else:
        assert_never(formula)


def resolve_activity_level(value: ActivityLevel | float | str) -> ActivityLevel:
    """Map a level, level name or numeric factor onto the fixed set."""
    if isinstance(value, ActivityLevel):
        return value
    if isinstance(value, str):
        try:
            return ActivityLevel[value.strip().upper()]
        except KeyError:
            pass
    elif isinstance(value, int | float) and not isinstance(value, bool):
        for level in ActivityLevel:
            if math.isclose(level.factor, float(value), abs_tol=1e-9):
                return level
    raise ValidationError.single(
        "activity_factor", ErrorKind.INVALID_ENUM_VALUE, "invalid activity factor"
    )


def calculate_energy(
    bmr: float,
    activity: ActivityLevel | float | str,
    objective: Objective,
    calorie_adjustment: float | None = None,
    *,
    policy: EnergyPolicy | None = None,
) -> EnergyCalculation:
    """Scale BMR by activity and apply the objective adjustment."""
    resolved_policy = policy or EnergyPolicy()
    if bmr <= 0:
        raise ValidationError([invariant("bmr", "bmr must be greater than zero")])
    level = resolve_activity_level(activity)
    get = bmr * level.factor
    safe_floor = max(bmr, resolved_policy.minimum_vet_kcal)

    if objective is Objective.MAINTENANCE:
        requested = 0.0 if calorie_adjustment is None else calorie_adjustment
        return EnergyCalculation(
            bmr=bmr,
            activity_level=level,
            objective=objective,
            calorie_adjustment=0.0,
            requested_adjustment=requested,
            get=get,
            vet=get,
            safe_floor=safe_floor,
        )

    requested = (
        resolved_policy.default_adjustment(objective)
        if calorie_adjustment is None
        else calorie_adjustment
    )
    if requested < 0:
        raise ValidationError(
            [
                out_of_range(
                    "calorie_adjustment", "calorie adjustment must be zero or greater"
                )
            ]
        )

    if objective is Objective.HYPERTROPHY:
        vet = get + requested
    elif objective is Objective.WEIGHT_LOSS:
        vet = get - requested
    else:
        assert_never(objective)

    adjustment = requested
    floor_applied = False
    if objective is Objective.WEIGHT_LOSS and vet < safe_floor:
        if resolved_policy.floor_policy is FloorPolicy.REJECT:
            raise ValidationError(
                [
                    invariant(
                        "calorie_adjustment",
                        f"weight-loss target of {vet:.0f} kcal falls below the "
                        f"safe floor of {safe_floor:.0f} kcal",
                    )
                ]
            )
        vet = min(get, safe_floor)
        adjustment = get - vet
        floor_applied = True

    return EnergyCalculation(
        bmr=bmr,
        activity_level=level,
        objective=objective,
        calorie_adjustment=adjustment,
        requested_adjustment=requested,
        get=get,
        vet=vet,
        safe_floor=safe_floor,
        floor_applied=floor_applied,
    )


def bmr_per_kg_advisory(bmr: float, weight: float) -> str | None:
    """Return a warning when BMR per kg looks implausible for the weight."""
    per_kg = bmr / weight
    if BMR_PER_KG_MIN <= per_kg <= BMR_PER_KG_MAX:
        return None
    return (
        f"BMR of {per_kg:.1f} kcal/kg is outside the expected "
        f"{BMR_PER_KG_MIN:.0f}-{BMR_PER_KG_MAX:.0f} kcal/kg range, please double check"
    )
