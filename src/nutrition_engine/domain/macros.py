"""Domain models for macronutrient prescriptions and meal splits."""

from dataclasses import dataclass
from enum import Enum

from nutrition_engine.domain import rounding


class MacroMode(Enum):
    """How a protein or fat target is expressed."""

    GRAMS_PER_KG = "g_per_kg"
    GRAMS_PER_DAY = "g_per_day"


@dataclass(frozen=True)
class MacroSpec:
    """Caller-provided target for protein or fat."""

    mode: MacroMode
    value: float

    def grams_for(self, weight: float) -> float:
        """Return daily grams for the given body weight."""
        if self.mode is MacroMode.GRAMS_PER_KG:
            return self.value * weight
        return self.value


@dataclass(frozen=True)
class MacroAmount:
    """Grams, kcal and share of VET for one macronutrient."""

    grams: float
    kcal: float
    percentage: float

    def display(self) -> dict[str, float | int]:
        return {
            "grams": rounding.grams(self.grams),
            "kcal": rounding.kcal(self.kcal),
            "percentage": rounding.percent(self.percentage),
        }


@dataclass(frozen=True)
class MacroDefinition:
    """Daily macronutrient prescription with carbohydrate by difference."""

    vet: float
    weight: float
    protein_spec: MacroSpec
    fat_spec: MacroSpec
    protein: MacroAmount
    fat: MacroAmount
    carbs: MacroAmount

    @property
    def total_kcal(self) -> float:
        return self.protein.kcal + self.fat.kcal + self.carbs.kcal

    def display(self) -> dict[str, object]:
        return {
            "vet": rounding.kcal(self.vet),
            "protein": self.protein.display(),
            "fat": self.fat.display(),
            "carbs": self.carbs.display(),
        }


@dataclass(frozen=True)
class MealSlot:
    """A meal and its share of the daily targets.

    Per-macro percentages default to ``percentage`` when not set.
    """

    name: str
    percentage: float
    protein_percentage: float | None = None
    fat_percentage: float | None = None
    carb_percentage: float | None = None

    @property
    def protein_share(self) -> float:
        if self.protein_percentage is None:
            return self.percentage
        return self.protein_percentage

    @property
    def fat_share(self) -> float:
        return self.percentage if self.fat_percentage is None else self.fat_percentage

    @property
    def carb_share(self) -> float:
        return self.percentage if self.carb_percentage is None else self.carb_percentage


@dataclass(frozen=True)
class MealTarget:
    """Macro targets for one meal."""

    name: str
    percentage: float
    protein_g: float
    fat_g: float
    carbs_g: float

    @property
    def kcal(self) -> float:
        return self.protein_g * 4 + self.fat_g * 9 + self.carbs_g * 4

    def display(self) -> dict[str, object]:
        return {
            "name": self.name,
            "percentage": rounding.percent(self.percentage),
            "protein_g": rounding.grams(self.protein_g),
            "fat_g": rounding.grams(self.fat_g),
            "carbs_g": rounding.grams(self.carbs_g),
            "kcal": rounding.kcal(self.kcal),
        }


@dataclass(frozen=True)
class MealDistribution:
    """Daily targets split across meals."""

    meals: tuple[MealTarget, ...]
    total_protein_g: float
    total_fat_g: float
    total_carbs_g: float

    def display(self) -> dict[str, object]:
        return {
            "meals": [meal.display() for meal in self.meals],
            "total_protein_g": rounding.grams(self.total_protein_g),
            "total_fat_g": rounding.grams(self.total_fat_g),
            "total_carbs_g": rounding.grams(self.total_carbs_g),
        }
