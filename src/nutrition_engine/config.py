"""Engine configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_engine.domain.forms import CUSTOM_DAY_TYPE

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_DAY_TYPES: tuple[str, ...] = (
    "Training Day",
    "Rest Day",
    "Low Carb Day",
    "High Carb Day",
    "Moderate Carb Day",
    "Refeed Day",
    "Deload Day",
    "Competition Day",
    "Travel Day",
    CUSTOM_DAY_TYPE,
)


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    open_food_facts_base_url: str = "https://world.openfoodfacts.org"
    open_food_facts_user_agent: str = "nutrition-engine/0.1"
    timezone: str = "UTC"
    extra_meal_cleanup_orphans: bool = False
    day_type_labels: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_day_type_labels(raw: str | None) -> tuple[str, ...]:
    """Parse the day-type labels offered by pickers from env.

    The custom day type is always offered last so users can type their own.
    """
    if raw is None or not raw.strip():
        return DEFAULT_DAY_TYPES
    labels: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip()
        if value and value != CUSTOM_DAY_TYPE and value not in labels:
            labels.append(value)
    if not labels:
        return DEFAULT_DAY_TYPES
    return (*labels, CUSTOM_DAY_TYPE)
