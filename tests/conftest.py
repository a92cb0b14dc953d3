"""Shared test fixtures."""

import pytest

from nutrition_engine.config import Settings
from nutrition_engine.containers import AppContainer, build_container
from nutrition_engine.services.calculator import NutritionCalculator


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        minimum_vet_kcal=1200.0,
        weight_loss_floor_policy="reject",
    )


@pytest.fixture
def calculator(settings: Settings) -> NutritionCalculator:
    return NutritionCalculator.from_settings(settings)


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)


@pytest.fixture
def female_lean_profile() -> dict[str, object]:
    return {
        "weight": 70,
        "height": 170,
        "age": 30,
        "sex": "female",
        "profile_type": "lean",
    }
