"""Dependency container wiring for the application."""

from dataclasses import dataclass

from nutrition_engine.config import Settings
from nutrition_engine.services.calculator import NutritionCalculator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    calculator: NutritionCalculator


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    return AppContainer(
        settings=resolved_settings,
        calculator=NutritionCalculator.from_settings(resolved_settings),
    )
