"""Patient profile used for energy calculations."""

from dataclasses import dataclass
from enum import Enum

from nutrition_engine.domain.energy import BmrFormula


class Sex(Enum):
    """Biological sex used to pick sex-specific coefficients."""

    MALE = "male"
    FEMALE = "female"


class ProfileType(Enum):
    """Body-profile classification that selects the default BMR formula."""

    LEAN = "lean"
    OVERWEIGHT_OBESE = "overweight_obese"
    ATHLETE = "athlete"


@dataclass(frozen=True)
class Profile:
    """Anthropometric inputs in kg, cm and years.

    ``formula`` overrides the profile-type default. ``body_fat_percentage``
    is only needed by the lean-mass formulas.
    """

    weight: float | None
    sex: Sex
    profile_type: ProfileType
    height: float | None = None
    age: float | None = None
    formula: BmrFormula | None = None
    body_fat_percentage: float | None = None
