"""Domain models for basal and total energy targets."""

from dataclasses import dataclass
from enum import Enum

from nutrition_engine.domain import rounding


class BmrFormula(Enum):
    """Basal metabolic rate equations the engine can apply."""

    HARRIS_BENEDICT = "harris_benedict"
    MIFFLIN_ST_JEOR = "mifflin_st_jeor"
    TINSLEY = "tinsley"
    OWEN = "owen"
    KATCH_MCARDLE = "katch_mcardle"
    CUNNINGHAM = "cunningham"
    SCHOFIELD = "schofield"


class ActivityLevel(Enum):
    """Clinical physical activity factors (single source of truth)."""

    SEDENTARY = 1.2
    LIGHTLY_ACTIVE = 1.375
    MODERATELY_ACTIVE = 1.55
    VERY_ACTIVE = 1.725
    EXTRA_ACTIVE = 1.9

    @property
    def factor(self) -> float:
        return self.value


class Objective(Enum):
    """Caloric objective applied on top of total energy expenditure."""

    MAINTENANCE = "maintenance"
    HYPERTROPHY = "hypertrophy"
    WEIGHT_LOSS = "weight_loss"


class FloorPolicy(Enum):
    """What to do when a weight-loss deficit drops below the safe floor."""

    REJECT = "reject"
    CLAMP = "clamp"


@dataclass(frozen=True)
class BmrResult:
    """Basal metabolic rate and the formula that produced it."""

    value: float
    formula: BmrFormula

    def display(self) -> dict[str, object]:
        return {"bmr": rounding.kcal(self.value), "formula": self.formula.value}


@dataclass(frozen=True)
class EnergyCalculation:
    """Total energy expenditure (GET) and the adjusted target (VET)."""

    bmr: float
    activity_level: ActivityLevel
    objective: Objective
    calorie_adjustment: float
    requested_adjustment: float
    get: float
    vet: float
    safe_floor: float
    floor_applied: bool = False

    @property
    def activity_factor(self) -> float:
        return self.activity_level.factor

    def display(self) -> dict[str, object]:
        """Return rounded values for presentation."""
        return {
            "bmr": rounding.kcal(self.bmr),
            "activity_factor": self.activity_factor,
            "objective": self.objective.value,
            "calorie_adjustment": rounding.kcal(self.calorie_adjustment),
            "get": rounding.kcal(self.get),
            "vet": rounding.kcal(self.vet),
            "safe_floor": rounding.kcal(self.safe_floor),
            "floor_applied": self.floor_applied,
        }
