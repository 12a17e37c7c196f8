"""Dependency container wiring for the engine."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_engine.adapters.open_food_facts_client import HttpxOpenFoodFactsClient
from nutrition_engine.adapters.supabase_food_item_repository import (
    SupabaseFoodItemRepository,
)
from nutrition_engine.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from nutrition_engine.adapters.supabase_nutrition_plan_repository import (
    SupabaseNutritionPlanRepository,
)
from nutrition_engine.config import Settings, parse_day_type_labels
from nutrition_engine.services.cache import InMemoryCache
from nutrition_engine.services.extra_meals import ExtraMealService
from nutrition_engine.services.foods import FoodItemService
from nutrition_engine.services.meal_logs import MealLogService
from nutrition_engine.services.plans import NutritionPlanService


@dataclass
class EngineContainer:
    """Holds engine-wide dependencies."""

    settings: Settings
    day_type_labels: tuple[str, ...]
    plan_service: NutritionPlanService
    food_service: FoodItemService
    meal_log_service: MealLogService
    extra_meal_service: ExtraMealService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> EngineContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodItemRepository(supabase_client)
    plan_repository = SupabaseNutritionPlanRepository(supabase_client)
    meal_log_repository = SupabaseMealLogRepository(supabase_client)

    open_food_facts_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.open_food_facts_base_url,
        user_agent=resolved_settings.open_food_facts_user_agent,
    )
    food_service = FoodItemService(
        repository=food_repository,
        open_food_facts=open_food_facts_client,
        cache=InMemoryCache(),
    )
    plan_service = NutritionPlanService(plan_repository)
    meal_log_service = MealLogService(
        repository=meal_log_repository,
        plan_service=plan_service,
        timezone_name=resolved_settings.timezone,
    )
    extra_meal_service = ExtraMealService(
        repository=meal_log_repository,
        food_service=food_service,
        timezone_name=resolved_settings.timezone,
        cleanup_orphans=resolved_settings.extra_meal_cleanup_orphans,
    )

    async def close_resources() -> None:
        await open_food_facts_client.close()

    return EngineContainer(
        settings=resolved_settings,
        day_type_labels=parse_day_type_labels(resolved_settings.day_type_labels),
        plan_service=plan_service,
        food_service=food_service,
        meal_log_service=meal_log_service,
        extra_meal_service=extra_meal_service,
        close_resources=close_resources,
    )
