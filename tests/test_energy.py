"""Tests for BMR formula selection and energy adjustment."""

import pytest

from nutrition_engine.domain.body_composition import (
    SkinfoldMeasurements,
    SkinfoldProtocol,
)
from nutrition_engine.domain.energy import (
    ActivityLevel,
    BmrFormula,
    FloorPolicy,
    Objective,
)
from nutrition_engine.domain.errors import ErrorKind, ValidationError
from nutrition_engine.domain.profile import Profile, ProfileType, Sex
from nutrition_engine.services.body_composition import analyze_body_composition
from nutrition_engine.services.energy import (
    EnergyPolicy,
    bmr_per_kg_advisory,
    calculate_bmr,
    calculate_energy,
    resolve_activity_level,
)


def test_lean_female_uses_harris_benedict() -> None:
    profile = Profile(
        weight=70, height=170, age=30, sex=Sex.FEMALE, profile_type=ProfileType.LEAN
    )

    result = calculate_bmr(profile)

    # 447.6 + 647.5 + 527 - 129.9
    assert result.value == pytest.approx(1492.2)
    assert result.formula is BmrFormula.HARRIS_BENEDICT


def test_lean_male_uses_harris_benedict() -> None:
    profile = Profile(
        weight=80, height=180, age=30, sex=Sex.MALE, profile_type=ProfileType.LEAN
    )

    result = calculate_bmr(profile)

    assert result.value == pytest.approx(88.36 + 13.4 * 80 + 4.8 * 180 - 5.7 * 30)


def test_overweight_profile_uses_mifflin_st_jeor() -> None:
    male = Profile(
        weight=80,
        height=180,
        age=30,
        sex=Sex.MALE,
        profile_type=ProfileType.OVERWEIGHT_OBESE,
    )
    female = Profile(
        weight=60,
        height=165,
        age=25,
        sex=Sex.FEMALE,
        profile_type=ProfileType.OVERWEIGHT_OBESE,
    )

    assert calculate_bmr(male).value == pytest.approx(1780)
    assert calculate_bmr(female).value == pytest.approx(1345.25)
    assert calculate_bmr(male).formula is BmrFormula.MIFFLIN_ST_JEOR


def test_athlete_ignores_sex_height_and_age() -> None:
    male = Profile(weight=75, sex=Sex.MALE, profile_type=ProfileType.ATHLETE)
    female = Profile(
        weight=75, height=160, age=50, sex=Sex.FEMALE, profile_type=ProfileType.ATHLETE
    )

    assert calculate_bmr(male).value == pytest.approx(1650)
    assert calculate_bmr(female).value == calculate_bmr(male).value
    assert calculate_bmr(male).formula is BmrFormula.TINSLEY


def test_missing_weight_is_rejected() -> None:
    profile = Profile(weight=None, sex=Sex.MALE, profile_type=ProfileType.ATHLETE)

    with pytest.raises(ValidationError) as exc_info:
        calculate_bmr(profile)

    error = exc_info.value.errors[0]
    assert error.field == "weight"
    assert error.kind is ErrorKind.MISSING_REQUIRED_FIELD


def test_missing_height_and_age_reported_together() -> None:
    profile = Profile(weight=70, sex=Sex.FEMALE, profile_type=ProfileType.LEAN)

    with pytest.raises(ValidationError) as exc_info:
        calculate_bmr(profile)

    fields = {error.field for error in exc_info.value.errors}
    assert fields == {"height", "age"}
    assert all(
        error.message == "height/age required for this profile"
        for error in exc_info.value.errors
    )


def test_bmr_positive_for_every_profile_type() -> None:
    for profile_type in ProfileType:
        for sex in Sex:
            profile = Profile(
                weight=60, height=165, age=40, sex=sex, profile_type=profile_type
            )
            assert calculate_bmr(profile).value > 0, f"{profile_type} {sex}"


def test_resolve_activity_level_accepts_factor_and_name() -> None:
    assert resolve_activity_level(1.55) is ActivityLevel.MODERATELY_ACTIVE
    assert resolve_activity_level("very_active") is ActivityLevel.VERY_ACTIVE
    assert resolve_activity_level(ActivityLevel.SEDENTARY) is ActivityLevel.SEDENTARY


@pytest.mark.parametrize("value", [1.5, 0, "couch", True])
def test_resolve_activity_level_rejects_unknown(value: object) -> None:
    with pytest.raises(ValidationError) as exc_info:
        resolve_activity_level(value)

    assert exc_info.value.errors[0].kind is ErrorKind.INVALID_ENUM_VALUE


def test_maintenance_matches_worked_example() -> None:
    result = calculate_energy(1492.2, 1.55, Objective.MAINTENANCE)

    assert result.get == pytest.approx(2312.91)
    assert result.vet == result.get
    assert result.display()["vet"] == 2313


def test_maintenance_ignores_supplied_adjustment() -> None:
    result = calculate_energy(1600, ActivityLevel.SEDENTARY, Objective.MAINTENANCE, 700)

    assert result.vet == result.get
    assert result.calorie_adjustment == 0
    assert result.requested_adjustment == 700


def test_hypertrophy_adds_adjustment() -> None:
    result = calculate_energy(1700, 1.375, Objective.HYPERTROPHY, 300)

    assert result.vet == result.get + 300


def test_weight_loss_subtracts_adjustment() -> None:
    result = calculate_energy(1700, 1.55, Objective.WEIGHT_LOSS, 500)

    assert result.vet == result.get - 500
    assert not result.floor_applied


def test_objective_defaults_apply_when_adjustment_omitted() -> None:
    policy = EnergyPolicy(weight_loss_deficit_kcal=450, hypertrophy_surplus_kcal=350)

    loss = calculate_energy(1800, 1.55, Objective.WEIGHT_LOSS, policy=policy)
    gain = calculate_energy(1800, 1.55, Objective.HYPERTROPHY, policy=policy)

    assert loss.vet == loss.get - 450
    assert gain.vet == gain.get + 350


def test_negative_adjustment_is_out_of_range() -> None:
    with pytest.raises(ValidationError) as exc_info:
        calculate_energy(1700, 1.2, Objective.HYPERTROPHY, -100)

    assert exc_info.value.errors[0].kind is ErrorKind.OUT_OF_RANGE_VALUE


def test_weight_loss_below_floor_is_rejected() -> None:
    with pytest.raises(ValidationError) as exc_info:
        calculate_energy(1300, 1.2, Objective.WEIGHT_LOSS, 800)

    error = exc_info.value.errors[0]
    assert error.kind is ErrorKind.INVARIANT_VIOLATION
    assert error.field == "calorie_adjustment"


def test_weight_loss_below_floor_is_clamped_and_flagged() -> None:
    policy = EnergyPolicy(floor_policy=FloorPolicy.CLAMP)

    result = calculate_energy(1300, 1.2, Objective.WEIGHT_LOSS, 800, policy=policy)

    assert result.floor_applied
    assert result.vet == pytest.approx(1300)
    assert result.safe_floor == pytest.approx(1300)
    assert result.vet == pytest.approx(result.get - result.calorie_adjustment)
    assert result.requested_adjustment == 800


def test_clamp_never_raises_vet_above_get() -> None:
    policy = EnergyPolicy(floor_policy=FloorPolicy.CLAMP, minimum_vet_kcal=2000)

    result = calculate_energy(1000, 1.2, Objective.WEIGHT_LOSS, 300, policy=policy)

    assert result.vet == pytest.approx(result.get)
    assert result.calorie_adjustment == pytest.approx(0)
    assert result.vet >= 0


def test_bmr_per_kg_advisory() -> None:
    assert bmr_per_kg_advisory(1500, 70) is None
    assert bmr_per_kg_advisory(3000, 70) is not None


def test_owen_needs_only_weight_and_sex() -> None:
    profile = Profile(
        weight=80,
        sex=Sex.MALE,
        profile_type=ProfileType.LEAN,
        formula=BmrFormula.OWEN,
    )

    result = calculate_bmr(profile)

    assert result.value == pytest.approx(879 + 10.2 * 80)
    assert result.formula is BmrFormula.OWEN


def test_lean_mass_formulas_use_body_fat() -> None:
    def bmr(formula: BmrFormula) -> float:
        profile = Profile(
            weight=80,
            sex=Sex.MALE,
            profile_type=ProfileType.ATHLETE,
            formula=formula,
            body_fat_percentage=20,
        )
        return calculate_bmr(profile).value

    # lean body mass 64 kg
    assert bmr(BmrFormula.KATCH_MCARDLE) == pytest.approx(370 + 21.6 * 64)
    assert bmr(BmrFormula.CUNNINGHAM) == pytest.approx(500 + 22 * 64)


def test_lean_mass_formula_without_body_fat_is_missing() -> None:
    profile = Profile(
        weight=80,
        sex=Sex.MALE,
        profile_type=ProfileType.ATHLETE,
        formula=BmrFormula.CUNNINGHAM,
    )

    with pytest.raises(ValidationError) as exc_info:
        calculate_bmr(profile)

    error = exc_info.value.errors[0]
    assert error.field == "body_fat_percentage"
    assert error.kind is ErrorKind.MISSING_REQUIRED_FIELD
    assert error.message == "body_fat_percentage required for the cunningham formula"


def test_body_fat_outside_range_is_rejected() -> None:
    profile = Profile(
        weight=80,
        sex=Sex.MALE,
        profile_type=ProfileType.ATHLETE,
        formula=BmrFormula.KATCH_MCARDLE,
        body_fat_percentage=120,
    )

    with pytest.raises(ValidationError) as exc_info:
        calculate_bmr(profile)

    assert exc_info.value.errors[0].kind is ErrorKind.OUT_OF_RANGE_VALUE


@pytest.mark.parametrize(
    ("sex", "age", "expected"),
    [
        (Sex.MALE, 30, 15.3 * 70 + 679),
        (Sex.MALE, 45, 11.6 * 70 + 879),
        (Sex.MALE, 70, 13.5 * 70 + 487),
        (Sex.FEMALE, 16, 12.2 * 70 + 746),
        (Sex.FEMALE, 25, 14.7 * 70 + 496),
    ],
)
def test_schofield_age_bands(sex: Sex, age: float, expected: float) -> None:
    profile = Profile(
        weight=70,
        sex=sex,
        profile_type=ProfileType.LEAN,
        age=age,
        formula=BmrFormula.SCHOFIELD,
    )

    assert calculate_bmr(profile).value == pytest.approx(expected)


def test_schofield_requires_age() -> None:
    profile = Profile(
        weight=70,
        height=175,
        sex=Sex.FEMALE,
        profile_type=ProfileType.LEAN,
        formula=BmrFormula.SCHOFIELD,
    )

    with pytest.raises(ValidationError) as exc_info:
        calculate_bmr(profile)

    assert [error.field for error in exc_info.value.errors] == ["age"]


def test_skinfold_body_fat_feeds_lean_mass_formula() -> None:
    assessment = analyze_body_composition(
        SkinfoldMeasurements(chest=15, abdomen=20, thigh=10),
        weight=80,
        age=30,
        sex=Sex.MALE,
        protocol=SkinfoldProtocol.THREE_SITE,
    )
    profile = Profile(
        weight=80,
        sex=Sex.MALE,
        profile_type=ProfileType.ATHLETE,
        formula=BmrFormula.KATCH_MCARDLE,
        body_fat_percentage=assessment.body_fat_percentage,
    )

    result = calculate_bmr(profile)

    assert result.value == pytest.approx(370 + 21.6 * assessment.lean_body_mass)
