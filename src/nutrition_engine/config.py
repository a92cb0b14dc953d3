"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_engine.domain.energy import FloorPolicy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    environment: str = _ENVIRONMENT
    debug: bool = False
    log_level: str = "INFO"
    minimum_vet_kcal: float = 1200.0
    weight_loss_floor_policy: str = "reject"
    weight_loss_deficit_kcal: float = 500.0
    hypertrophy_surplus_kcal: float = 400.0
    meal_split_tolerance: float = 0.1

    model_config = SettingsConfigDict(
        env_prefix="NUTRITION_ENGINE_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_floor_policy(raw: str | None) -> FloorPolicy:
    """Parse the weight-loss floor policy, defaulting to reject."""
    if raw is None:
        return FloorPolicy.REJECT
    cleaned = raw.strip().lower()
    if not cleaned:
        return FloorPolicy.REJECT
    try:
        return FloorPolicy(cleaned)
    except ValueError:
        raise ValueError(
            f"Unknown weight-loss floor policy {raw!r}; expected 'reject' or 'clamp'"
        ) from None
