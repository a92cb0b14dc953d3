"""Domain models for skinfold body-composition analysis."""

from dataclasses import dataclass, fields
from enum import Enum

from nutrition_engine.domain import rounding
from nutrition_engine.domain.profile import Sex


class SkinfoldProtocol(Enum):
    """Jackson & Pollock skinfold protocols."""

    THREE_SITE = "three_site"
    SEVEN_SITE = "seven_site"


class BodyFatFormula(Enum):
    """Equations converting body density into body-fat percentage."""

    SIRI = "siri"
    BROZEK = "brozek"


@dataclass(frozen=True)
class SkinfoldMeasurements:
    """Skinfold thicknesses in mm; sites not measured stay None."""

    chest: float | None = None
    abdomen: float | None = None
    thigh: float | None = None
    triceps: float | None = None
    subscapular: float | None = None
    suprailiac: float | None = None
    midaxillary: float | None = None

    @classmethod
    def site_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def value_of(self, site: str) -> float | None:
        return getattr(self, site)


@dataclass(frozen=True)
class BodyCompositionResult:
    """Body density, body fat and the fat/lean mass partition."""

    body_density: float
    body_fat_percentage: float
    fat_mass: float
    lean_body_mass: float
    protocol: SkinfoldProtocol
    formula: BodyFatFormula
    sex: Sex
    skinfold_sum: float

    def display(self) -> dict[str, object]:
        return {
            "body_density": rounding.round_half_up(
                self.body_density, rounding.DENSITY_PLACES
            ),
            "body_fat_percentage": rounding.round_half_up(
                self.body_fat_percentage, rounding.BODY_FAT_PLACES
            ),
            "fat_mass": rounding.round_half_up(self.fat_mass, rounding.MASS_PLACES),
            "lean_body_mass": rounding.round_half_up(
                self.lean_body_mass, rounding.MASS_PLACES
            ),
            "protocol": self.protocol.value,
            "formula": self.formula.value,
            "sex": self.sex.value,
            "skinfold_sum": rounding.grams(self.skinfold_sum),
        }
