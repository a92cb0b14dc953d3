"""Input validation for raw calculation requests.

Raw mappings are parsed with pydantic models that carry the plausible range
of every field. All problems are collected and translated into the engine's
error taxonomy so callers can show the complete list at once.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, ClassVar, Self, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from nutrition_engine.domain.body_composition import (
    BodyFatFormula,
    SkinfoldMeasurements,
    SkinfoldProtocol,
)
from nutrition_engine.domain.energy import ActivityLevel, BmrFormula, Objective
from nutrition_engine.domain.errors import (
    ErrorKind,
    FieldError,
    ValidationError,
    missing,
)
from nutrition_engine.domain.macros import MacroMode, MacroSpec, MealSlot
from nutrition_engine.domain.profile import Profile, ProfileType, Sex
from nutrition_engine.services.body_composition import validate_skinfolds
from nutrition_engine.services.energy import (
    FORMULA_INPUTS,
    missing_input_message,
    resolve_activity_level,
    select_formula,
)

WEIGHT_RANGE_KG = (20.0, 300.0)
HEIGHT_RANGE_CM = (100.0, 250.0)
AGE_RANGE_YEARS = (10.0, 100.0)
MAX_CALORIE_ADJUSTMENT_KCAL = 2000.0
MAX_VET_KCAL = 10000.0

_KIND_BY_ERROR_TYPE = {
    "missing": ErrorKind.MISSING_REQUIRED_FIELD,
    "missing_for_formula": ErrorKind.MISSING_REQUIRED_FIELD,
    "enum": ErrorKind.INVALID_ENUM_VALUE,
    "literal_error": ErrorKind.INVALID_ENUM_VALUE,
    "invalid_activity_factor": ErrorKind.INVALID_ENUM_VALUE,
}

ModelT = TypeVar("ModelT", bound=BaseModel)
Share = Annotated[float, Field(ge=0, le=100)]


class _InputModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class ProfileInput(_InputModel):
    """Anthropometric profile and optional BMR formula override.

    Which of height, age and body-fat percentage are required depends on the
    formula: the explicit one, or the default for the profile type.
    """

    weight: float = Field(ge=WEIGHT_RANGE_KG[0], le=WEIGHT_RANGE_KG[1])
    sex: Sex
    profile_type: ProfileType
    formula: BmrFormula | None = None
    height: float | None = Field(
        default=None,
        ge=HEIGHT_RANGE_CM[0],
        le=HEIGHT_RANGE_CM[1],
        validate_default=True,
    )
    age: float | None = Field(
        default=None,
        ge=AGE_RANGE_YEARS[0],
        le=AGE_RANGE_YEARS[1],
        validate_default=True,
    )
    body_fat_percentage: float | None = Field(
        default=None, gt=0, lt=100, validate_default=True
    )

    @field_validator("height", "age", "body_fat_percentage")
    @classmethod
    def _required_by_formula(
        cls, value: float | None, info: ValidationInfo
    ) -> float | None:
        if value is not None or "formula" not in info.data:
            return value
        explicit = info.data["formula"]
        profile_type = info.data.get("profile_type")
        if explicit is None and not isinstance(profile_type, ProfileType):
            return value
        formula = select_formula(profile_type, explicit)
        if info.field_name in FORMULA_INPUTS[formula]:
            raise PydanticCustomError(
                "missing_for_formula",
                missing_input_message(info.field_name, explicit),
            )
        return value

    def to_profile(self) -> Profile:
        return Profile(
            weight=self.weight,
            sex=self.sex,
            profile_type=self.profile_type,
            height=self.height,
            age=self.age,
            formula=self.formula,
            body_fat_percentage=self.body_fat_percentage,
        )


class EnergyInput(ProfileInput):
    """Profile plus activity factor and caloric objective."""

    activity_factor: ActivityLevel
    objective: Objective = Objective.MAINTENANCE
    calorie_adjustment: float | None = Field(
        default=None, ge=0, le=MAX_CALORIE_ADJUSTMENT_KCAL
    )

    @field_validator("activity_factor", mode="before")
    @classmethod
    def _resolve_activity(cls, value: object) -> object:
        if value is None:
            return value
        try:
            return resolve_activity_level(value)  # type: ignore[arg-type]
        except ValidationError:
            raise PydanticCustomError(
                "invalid_activity_factor", "invalid activity factor"
            ) from None


class MacroSpecInput(_InputModel):
    """Protein target as g/kg (default) or absolute g/day.

    A bare number is read as g/kg.
    """

    max_per_kg: ClassVar[float] = 4.0
    max_per_day: ClassVar[float] = 600.0

    mode: MacroMode = MacroMode.GRAMS_PER_KG
    value: float = Field(ge=0)

    @model_validator(mode="before")
    @classmethod
    def _accept_number(cls, data: object) -> object:
        if isinstance(data, int | float) and not isinstance(data, bool):
            return {"mode": MacroMode.GRAMS_PER_KG, "value": data}
        return data

    @model_validator(mode="after")
    def _check_limit(self) -> Self:
        if self.mode is MacroMode.GRAMS_PER_KG:
            limit, unit = self.max_per_kg, "g/kg"
        else:
            limit, unit = self.max_per_day, "g/day"
        if self.value > limit:
            raise PydanticCustomError(
                "out_of_range",
                "value above the plausible limit of {limit} {unit}",
                {"limit": limit, "unit": unit},
            )
        return self

    def to_spec(self) -> MacroSpec:
        return MacroSpec(mode=self.mode, value=self.value)


class FatSpecInput(MacroSpecInput):
    """Fat target as g/kg (default) or absolute g/day."""

    max_per_kg: ClassVar[float] = 3.0
    max_per_day: ClassVar[float] = 400.0


class MacroInput(_InputModel):
    """Energy target, body weight and protein/fat targets."""

    vet: float = Field(gt=0, le=MAX_VET_KCAL)
    weight: float = Field(ge=WEIGHT_RANGE_KG[0], le=WEIGHT_RANGE_KG[1])
    protein: MacroSpecInput
    fat: FatSpecInput


class MealSlotInput(_InputModel):
    """A meal name and its share of daily targets."""

    name: str = Field(min_length=1)
    percentage: float = Field(ge=0, le=100)
    protein_percentage: float | None = Field(default=None, ge=0, le=100)
    fat_percentage: float | None = Field(default=None, ge=0, le=100)
    carb_percentage: float | None = Field(default=None, ge=0, le=100)

    def to_slot(self) -> MealSlot:
        return MealSlot(
            name=self.name,
            percentage=self.percentage,
            protein_percentage=self.protein_percentage,
            fat_percentage=self.fat_percentage,
            carb_percentage=self.carb_percentage,
        )


class MealChoiceMixin(_InputModel):
    """Explicit meal slots or a meal count that selects a template."""

    meals: list[MealSlotInput] | None = Field(default=None, min_length=1, max_length=6)
    meal_count: int | None = Field(default=None, ge=1, le=6)

    def slots(self) -> tuple[MealSlot, ...] | None:
        if self.meals is None:
            return None
        return tuple(slot.to_slot() for slot in self.meals)


class MealSplitInput(MacroInput, MealChoiceMixin):
    """Macro inputs plus the meals to split them across."""


class RebalanceInput(_InputModel):
    """Edit of one percentage slot."""

    percentages: list[Share] = Field(min_length=1, max_length=6)
    index: int = Field(ge=0)
    value: float = Field(ge=0, le=100)
    linked: int | None = Field(default=None, ge=0)


class PlanInput(EnergyInput, MealChoiceMixin):
    """Full pipeline request: profile, energy, macros and optional meals."""

    protein: MacroSpecInput | None = None
    fat: FatSpecInput


class SkinfoldInput(_InputModel):
    """Skinfold thicknesses in mm; range checks happen per protocol."""

    chest: float | None = None
    abdomen: float | None = None
    thigh: float | None = None
    triceps: float | None = None
    subscapular: float | None = None
    suprailiac: float | None = None
    midaxillary: float | None = None

    def to_measurements(self) -> SkinfoldMeasurements:
        return SkinfoldMeasurements(**self.model_dump())


class SkinfoldSitesInput(_InputModel):
    """Skinfolds with the sex and protocol that decide which sites count."""

    skinfolds: SkinfoldInput
    sex: Sex
    protocol: SkinfoldProtocol


class BodyCompositionInput(SkinfoldSitesInput):
    """Skinfold assessment request."""

    weight: float = Field(ge=WEIGHT_RANGE_KG[0], le=WEIGHT_RANGE_KG[1])
    age: float = Field(ge=AGE_RANGE_YEARS[0], le=AGE_RANGE_YEARS[1])
    formula: BodyFatFormula = BodyFatFormula.SIRI


@dataclass(frozen=True)
class BodyCompositionRequest:
    """Validated inputs for a body-composition analysis."""

    measurements: SkinfoldMeasurements
    weight: float
    age: float
    sex: Sex
    protocol: SkinfoldProtocol
    formula: BodyFatFormula


def parse(model: type[ModelT], raw: Mapping[str, object] | None) -> ModelT:
    """Validate a raw mapping, raising every field problem at once."""
    if raw is None:
        raise ValidationError([missing("input", "request body required")])
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(field_errors(exc)) from None


def field_errors(exc: PydanticValidationError) -> list[FieldError]:
    """Translate pydantic errors into engine field errors."""
    errors = []
    for error in exc.errors(include_url=False):
        # explicit nulls count as absent
        if error.get("input") is None:
            kind = ErrorKind.MISSING_REQUIRED_FIELD
        else:
            kind = _KIND_BY_ERROR_TYPE.get(error["type"], ErrorKind.OUT_OF_RANGE_VALUE)
        errors.append(FieldError(_format_loc(error["loc"]), kind, error["msg"]))
    return errors


def parse_profile(raw: Mapping[str, object] | None) -> Profile:
    return parse(ProfileInput, raw).to_profile()


def parse_body_composition(raw: Mapping[str, object] | None) -> BodyCompositionRequest:
    """Parse an assessment, reporting field and skinfold problems together."""
    errors: list[FieldError] = []
    payload: BodyCompositionInput | None = None
    try:
        payload = parse(BodyCompositionInput, raw)
    except ValidationError as exc:
        errors.extend(exc.errors)

    sites = payload or _sites_of(raw)
    if sites is not None:
        errors.extend(
            validate_skinfolds(
                sites.skinfolds.to_measurements(), sites.protocol, sites.sex
            )
        )
    if errors or payload is None:
        raise ValidationError(errors)
    return BodyCompositionRequest(
        measurements=payload.skinfolds.to_measurements(),
        weight=payload.weight,
        age=payload.age,
        sex=payload.sex,
        protocol=payload.protocol,
        formula=payload.formula,
    )


def _sites_of(raw: Mapping[str, object] | None) -> SkinfoldSitesInput | None:
    # Parse failures here are already part of the full-request errors.
    try:
        return SkinfoldSitesInput.model_validate(raw)
    except PydanticValidationError:
        return None


def _format_loc(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return "input"
    parts: list[str] = []
    for item in loc:
        if isinstance(item, int) and parts:
            parts[-1] = f"{parts[-1]}[{item}]"
        else:
            parts.append(str(item))
    return ".".join(parts)
