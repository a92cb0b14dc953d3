"""Macronutrient distribution with carbohydrate by difference."""

from nutrition_engine.domain.errors import ValidationError, invariant, out_of_range
from nutrition_engine.domain.macros import (
    MacroAmount,
    MacroDefinition,
    MacroMode,
    MacroSpec,
)
from nutrition_engine.domain.profile import ProfileType

KCAL_PER_GRAM = {
    "protein": 4.0,
    "carbs": 4.0,
    "fat": 9.0,
}

DEFAULT_PROTEIN_PER_KG: dict[ProfileType, float] = {
    ProfileType.LEAN: 1.8,
    ProfileType.OVERWEIGHT_OBESE: 2.0,
    ProfileType.ATHLETE: 2.2,
}

# Recommended share of VET, in percent.
RECOMMENDED_RANGES = {
    "protein": (10.0, 35.0),
    "carbs": (45.0, 65.0),
    "fat": (20.0, 35.0),
}


def default_protein_spec(profile_type: ProfileType) -> MacroSpec:
    """Return the default g/kg protein target for a profile type."""
    return MacroSpec(MacroMode.GRAMS_PER_KG, DEFAULT_PROTEIN_PER_KG[profile_type])


def distribute_macros(
    vet: float, weight: float, protein: MacroSpec, fat: MacroSpec
) -> MacroDefinition:
    """Convert protein and fat targets plus VET into a full prescription.

    Protein and fat may use different modes. Carbohydrate takes whatever
    energy remains, so the three kcal values always add up to ``vet``.
    """
    errors = []
    if vet <= 0:
        errors.append(
            out_of_range("vet", "total energy target must be greater than zero")
        )
    if weight <= 0:
        errors.append(out_of_range("weight", "weight must be greater than zero"))
    if protein.value < 0:
        errors.append(out_of_range("protein", "protein target cannot be negative"))
    if fat.value < 0:
        errors.append(out_of_range("fat", "fat target cannot be negative"))
    if errors:
        raise ValidationError(errors)

    protein_g = protein.grams_for(weight)
    fat_g = fat.grams_for(weight)
    protein_kcal = protein_g * KCAL_PER_GRAM["protein"]
    fat_kcal = fat_g * KCAL_PER_GRAM["fat"]
    if protein_kcal + fat_kcal > vet:
        raise ValidationError(
            [invariant("macros", "protein+fat exceed total energy target")]
        )

    carb_kcal = vet - protein_kcal - fat_kcal
    carb_g = carb_kcal / KCAL_PER_GRAM["carbs"]

    return MacroDefinition(
        vet=vet,
        weight=weight,
        protein_spec=protein,
        fat_spec=fat,
        protein=MacroAmount(protein_g, protein_kcal, protein_kcal / vet * 100),
        fat=MacroAmount(fat_g, fat_kcal, fat_kcal / vet * 100),
        carbs=MacroAmount(carb_g, carb_kcal, carb_kcal / vet * 100),
    )


def macro_percentage_advisories(definition: MacroDefinition) -> list[str]:
    """Return warnings for macro shares outside the recommended ranges."""
    shares = {
        "protein": definition.protein.percentage,
        "carbs": definition.carbs.percentage,
        "fat": definition.fat.percentage,
    }
    advisories = []
    for name, share in shares.items():
        low, high = RECOMMENDED_RANGES[name]
        if not low <= share <= high:
            advisories.append(
                f"{name} provides {share:.1f}% of energy, "
                f"outside the recommended {low:.0f}-{high:.0f}%"
            )
    return advisories
