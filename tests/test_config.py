"""Tests for application settings."""

import pytest

from nutrition_engine.config import Settings, parse_floor_policy
from nutrition_engine.domain.energy import FloorPolicy


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NUTRITION_ENGINE_MINIMUM_VET_KCAL", "1500")
    monkeypatch.setenv("NUTRITION_ENGINE_WEIGHT_LOSS_FLOOR_POLICY", "clamp")
    monkeypatch.setenv("NUTRITION_ENGINE_DEBUG", "true")

    settings = Settings()

    assert settings.minimum_vet_kcal == 1500
    assert settings.weight_loss_floor_policy == "clamp"
    assert settings.debug is True


def test_parse_floor_policy_defaults_to_reject() -> None:
    assert parse_floor_policy(None) is FloorPolicy.REJECT
    assert parse_floor_policy("  ") is FloorPolicy.REJECT
    assert parse_floor_policy(" Clamp ") is FloorPolicy.CLAMP


def test_parse_floor_policy_rejects_unknown_value() -> None:
    with pytest.raises(ValueError, match="floor policy"):
        parse_floor_policy("ignore")
