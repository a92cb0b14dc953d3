"""Calculation service exposing the engine to callers.

Every method takes a raw mapping and returns a ``CalculationOutcome``: either
a complete result or the collected field errors, never both and never a
partial result.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from nutrition_engine.config import Settings, parse_floor_policy
from nutrition_engine.domain.body_composition import BodyCompositionResult
from nutrition_engine.domain.energy import BmrResult, EnergyCalculation
from nutrition_engine.domain.errors import FieldError, ValidationError, missing
from nutrition_engine.domain.macros import MacroDefinition, MealDistribution, MealSlot
from nutrition_engine.domain.profile import Profile
from nutrition_engine.services.body_composition import analyze_body_composition
from nutrition_engine.services.energy import (
    EnergyPolicy,
    bmr_per_kg_advisory,
    calculate_bmr,
    calculate_energy,
)
from nutrition_engine.services.macros import (
    default_protein_spec,
    distribute_macros,
    macro_percentage_advisories,
)
from nutrition_engine.services.meal_split import (
    SUM_TOLERANCE,
    meal_template,
    rebalance,
    split_meals,
)
from nutrition_engine.services.validation import (
    EnergyInput,
    MacroInput,
    MealChoiceMixin,
    MealSplitInput,
    PlanInput,
    RebalanceInput,
    parse,
    parse_body_composition,
    parse_profile,
)

_logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")
RawInput = Mapping[str, object] | None


@dataclass(frozen=True)
class CalculationOutcome(Generic[ResultT]):
    """Either a full result or the list of validation failures."""

    result: ResultT | None = None
    errors: tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_payload(self) -> list[dict[str, str]]:
        return [error.as_dict() for error in self.errors]


@dataclass(frozen=True)
class EnergyReport:
    """BMR, energy targets and plausibility advisories."""

    profile: Profile
    bmr: BmrResult
    energy: EnergyCalculation
    advisories: tuple[str, ...] = ()

    def display(self) -> dict[str, object]:
        return {
            "formula": self.bmr.formula.value,
            **self.energy.display(),
            "advisories": list(self.advisories),
        }


@dataclass(frozen=True)
class NutritionPlan:
    """Result of the full energy, macro and meal pipeline."""

    report: EnergyReport
    macros: MacroDefinition
    meals: MealDistribution | None
    advisories: tuple[str, ...] = ()

    def display(self) -> dict[str, object]:
        return {
            "energy": self.report.display(),
            "macros": self.macros.display(),
            "meals": self.meals.display() if self.meals else None,
            "advisories": list(self.advisories),
        }


@dataclass
class NutritionCalculator:
    """Runs validated calculations with the configured policies."""

    energy_policy: EnergyPolicy = field(default_factory=EnergyPolicy)
    meal_split_tolerance: float = SUM_TOLERANCE
    debug: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "NutritionCalculator":
        """Build a calculator from application settings."""
        return cls(
            energy_policy=EnergyPolicy(
                minimum_vet_kcal=settings.minimum_vet_kcal,
                floor_policy=parse_floor_policy(settings.weight_loss_floor_policy),
                weight_loss_deficit_kcal=settings.weight_loss_deficit_kcal,
                hypertrophy_surplus_kcal=settings.hypertrophy_surplus_kcal,
            ),
            meal_split_tolerance=settings.meal_split_tolerance,
            debug=settings.debug,
        )

    def calculate_bmr(self, raw: RawInput) -> CalculationOutcome[BmrResult]:
        """Select the BMR formula for a profile and apply it."""
        return self._run("bmr", lambda: calculate_bmr(parse_profile(raw)))

    def calculate_energy(self, raw: RawInput) -> CalculationOutcome[EnergyReport]:
        """Compute BMR, GET and VET for a profile and objective."""
        return self._run("energy", lambda: self._energy(parse(EnergyInput, raw)))

    def distribute_macros(self, raw: RawInput) -> CalculationOutcome[MacroDefinition]:
        """Compute protein, fat and carbohydrate targets for a given VET."""
        return self._run("macros", lambda: self._macros(parse(MacroInput, raw)))

    def split_meals(self, raw: RawInput) -> CalculationOutcome[MealDistribution]:
        """Compute macro targets and split them across meals."""

        def run() -> MealDistribution:
            payload = parse(MealSplitInput, raw)
            slots = self._slots(payload)
            if slots is None:
                raise ValidationError(
                    [missing("meals", "meals or meal_count required")]
                )
            return split_meals(self._macros(payload), slots, self.meal_split_tolerance)

        return self._run("meal split", run)

    def rebalance_meals(self, raw: RawInput) -> CalculationOutcome[tuple[float, ...]]:
        """Apply one percentage edit while keeping the total at 100."""

        def run() -> tuple[float, ...]:
            payload = parse(RebalanceInput, raw)
            return rebalance(
                payload.percentages,
                payload.index,
                payload.value,
                payload.linked,
                tolerance=self.meal_split_tolerance,
            )

        return self._run("rebalance", run)

    def calculate_plan(self, raw: RawInput) -> CalculationOutcome[NutritionPlan]:
        """Run the full pipeline: BMR, energy, macros and optional meals."""
        return self._run("plan", lambda: self._plan(parse(PlanInput, raw)))

    def analyze_body_composition(
        self, raw: RawInput
    ) -> CalculationOutcome[BodyCompositionResult]:
        """Estimate body fat and lean mass from skinfolds."""

        def run() -> BodyCompositionResult:
            request = parse_body_composition(raw)
            return analyze_body_composition(
                request.measurements,
                weight=request.weight,
                age=request.age,
                sex=request.sex,
                protocol=request.protocol,
                formula=request.formula,
            )

        return self._run("body composition", run)

    def _energy(self, payload: EnergyInput) -> EnergyReport:
        profile = payload.to_profile()
        bmr = calculate_bmr(profile)
        energy = calculate_energy(
            bmr.value,
            payload.activity_factor,
            payload.objective,
            payload.calorie_adjustment,
            policy=self.energy_policy,
        )
        advisory = bmr_per_kg_advisory(bmr.value, payload.weight)
        return EnergyReport(
            profile=profile,
            bmr=bmr,
            energy=energy,
            advisories=(advisory,) if advisory else (),
        )

    def _macros(self, payload: MacroInput) -> MacroDefinition:
        return distribute_macros(
            payload.vet,
            payload.weight,
            payload.protein.to_spec(),
            payload.fat.to_spec(),
        )

    def _plan(self, payload: PlanInput) -> NutritionPlan:
        report = self._energy(payload)
        protein = (
            payload.protein.to_spec()
            if payload.protein is not None
            else default_protein_spec(payload.profile_type)
        )
        macros = distribute_macros(
            report.energy.vet, payload.weight, protein, payload.fat.to_spec()
        )
        slots = self._slots(payload)
        meals = (
            split_meals(macros, slots, self.meal_split_tolerance)
            if slots is not None
            else None
        )
        advisories = (*report.advisories, *macro_percentage_advisories(macros))
        return NutritionPlan(
            report=report, macros=macros, meals=meals, advisories=advisories
        )

    def _slots(self, payload: MealChoiceMixin) -> tuple[MealSlot, ...] | None:
        slots = payload.slots()
        if slots is None and payload.meal_count is not None:
            return meal_template(payload.meal_count)
        return slots

    def _run(
        self, action: str, func: Callable[[], ResultT]
    ) -> CalculationOutcome[ResultT]:
        try:
            result = func()
        except ValidationError as exc:
            _logger.warning(
                "Nutrition %s rejected (%s errors): %s", action, len(exc.errors), exc
            )
            return CalculationOutcome(errors=exc.errors)
        if self.debug:
            _logger.info("Nutrition %s calculated", action)
        return CalculationOutcome(result=result)
