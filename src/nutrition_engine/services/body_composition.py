"""Skinfold body-composition analysis.

Body density from the Jackson & Pollock generalized equations
(men: Jackson & Pollock, 1978; women: Jackson, Pollock & Ward, 1980), then
body-fat percentage from Siri (1961) or Brozek (1963).
"""

from dataclasses import dataclass

from nutrition_engine.domain.body_composition import (
    BodyCompositionResult,
    BodyFatFormula,
    SkinfoldMeasurements,
    SkinfoldProtocol,
)
from nutrition_engine.domain.errors import (
    FieldError,
    ValidationError,
    invariant,
    missing,
    out_of_range,
)
from nutrition_engine.domain.profile import Sex

MAX_SKINFOLD_MM = 100.0
MAX_BODY_DENSITY = 1.2

THREE_SITE_SITES: dict[Sex, tuple[str, ...]] = {
    Sex.MALE: ("chest", "abdomen", "thigh"),
    Sex.FEMALE: ("triceps", "suprailiac", "thigh"),
}

SEVEN_SITE_SITES: tuple[str, ...] = (
    "chest",
    "abdomen",
    "thigh",
    "triceps",
    "subscapular",
    "suprailiac",
    "midaxillary",
)


@dataclass(frozen=True)
class DensityCoefficients:
    """Coefficients of ``intercept - a*S + b*S^2 - c*age``."""

    intercept: float
    linear: float
    quadratic: float
    age: float

    def apply(self, skinfold_sum: float, age: float) -> float:
        return (
            self.intercept
            - self.linear * skinfold_sum
            + self.quadratic * skinfold_sum**2
            - self.age * age
        )


THREE_SITE_COEFFICIENTS: dict[Sex, DensityCoefficients] = {
    Sex.MALE: DensityCoefficients(1.10938, 0.0008267, 0.0000016, 0.0002574),
    Sex.FEMALE: DensityCoefficients(1.0994921, 0.0009929, 0.0000023, 0.0001392),
}

SEVEN_SITE_COEFFICIENTS: dict[Sex, DensityCoefficients] = {
    Sex.MALE: DensityCoefficients(1.112, 0.00043499, 0.00000055, 0.00028826),
    Sex.FEMALE: DensityCoefficients(1.097, 0.00046971, 0.00000056, 0.00012828),
}

# (numerator, offset) in BF% = (numerator / BD - offset) * 100
BODY_FAT_CONSTANTS: dict[BodyFatFormula, tuple[float, float]] = {
    BodyFatFormula.SIRI: (4.95, 4.5),
    BodyFatFormula.BROZEK: (4.57, 4.142),
}


def required_sites(protocol: SkinfoldProtocol, sex: Sex) -> tuple[str, ...]:
    """Return the skinfold sites a protocol needs for the given sex."""
    if protocol is SkinfoldProtocol.THREE_SITE:
        return THREE_SITE_SITES[sex]
    return SEVEN_SITE_SITES


def validate_skinfolds(
    measurements: SkinfoldMeasurements, protocol: SkinfoldProtocol, sex: Sex
) -> list[FieldError]:
    """Collect every missing or implausible site instead of stopping at the first."""
    errors: list[FieldError] = []
    for site in required_sites(protocol, sex):
        value = measurements.value_of(site)
        if value is None:
            errors.append(missing(site, f"{site} skinfold required for this protocol"))
        elif value <= 0:
            errors.append(
                out_of_range(site, f"{site} skinfold must be greater than zero")
            )
        elif value > MAX_SKINFOLD_MM:
            errors.append(
                out_of_range(
                    site,
                    f"{site} skinfold above {MAX_SKINFOLD_MM:.0f} mm, "
                    "please double check",
                )
            )
    return errors


def skinfold_sum(
    measurements: SkinfoldMeasurements, protocol: SkinfoldProtocol, sex: Sex
) -> float:
    """Validate and add up the protocol's sites."""
    errors = validate_skinfolds(measurements, protocol, sex)
    if errors:
        raise ValidationError(errors)
    return sum(measurements.value_of(site) for site in required_sites(protocol, sex))


def body_density_three_site(
    measurements: SkinfoldMeasurements, age: float, sex: Sex
) -> float:
    """Jackson & Pollock 3-site body density in g/cm3."""
    total = skinfold_sum(measurements, SkinfoldProtocol.THREE_SITE, sex)
    return THREE_SITE_COEFFICIENTS[sex].apply(total, age)


def body_density_seven_site(
    measurements: SkinfoldMeasurements, age: float, sex: Sex
) -> float:
    """Jackson & Pollock 7-site body density in g/cm3."""
    total = skinfold_sum(measurements, SkinfoldProtocol.SEVEN_SITE, sex)
    return SEVEN_SITE_COEFFICIENTS[sex].apply(total, age)


def body_fat_percentage(body_density: float, formula: BodyFatFormula) -> float:
    """Convert body density into body-fat percentage."""
    if body_density <= 0 or body_density > MAX_BODY_DENSITY:
        raise ValidationError(
            [invariant("body_density", "density out of physiological range")]
        )
    numerator, offset = BODY_FAT_CONSTANTS[formula]
    return (numerator / body_density - offset) * 100


def body_fat_siri(body_density: float) -> float:
    return body_fat_percentage(body_density, BodyFatFormula.SIRI)


def body_fat_brozek(body_density: float) -> float:
    return body_fat_percentage(body_density, BodyFatFormula.BROZEK)


def partition_mass(weight: float, body_fat: float) -> tuple[float, float]:
    """Return ``(fat_mass, lean_mass)`` in kg."""
    errors = []
    if weight <= 0:
        errors.append(out_of_range("weight", "weight must be greater than zero"))
    if not 0 < body_fat < 100:
        errors.append(
            invariant(
                "body_fat_percentage",
                "body fat percentage must be between 0 and 100",
            )
        )
    if errors:
        raise ValidationError(errors)
    fat_mass = weight * body_fat / 100
    return fat_mass, weight - fat_mass


def analyze_body_composition(  # noqa: PLR0913
    measurements: SkinfoldMeasurements,
    weight: float,
    age: float,
    sex: Sex,
    protocol: SkinfoldProtocol,
    formula: BodyFatFormula = BodyFatFormula.SIRI,
) -> BodyCompositionResult:
    """Run density, body fat and mass partition for one assessment."""
    total = skinfold_sum(measurements, protocol, sex)
    if protocol is SkinfoldProtocol.THREE_SITE:
        coefficients = THREE_SITE_COEFFICIENTS[sex]
    else:
        coefficients = SEVEN_SITE_COEFFICIENTS[sex]
    density = coefficients.apply(total, age)
    body_fat = body_fat_percentage(density, formula)
    fat_mass, lean_mass = partition_mass(weight, body_fat)
    return BodyCompositionResult(
        body_density=density,
        body_fat_percentage=body_fat,
        fat_mass=fat_mass,
        lean_body_mass=lean_mass,
        protocol=protocol,
        formula=formula,
        sex=sex,
        skinfold_sum=total,
    )
