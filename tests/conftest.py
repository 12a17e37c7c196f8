"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time
from uuid import UUID, uuid4

import httpx
import pytest

from nutrition_engine.adapters.open_food_facts_client import OpenFoodFactsClient
from nutrition_engine.config import Settings
from nutrition_engine.domain.foods import FoodItem
from nutrition_engine.domain.meal_logs import LoggedFoodItem, LoggedMeal
from nutrition_engine.domain.plans import Meal, MealFoodItem, NutritionPlan
from nutrition_engine.errors import StoreError
from nutrition_engine.services.cache import InMemoryCache
from nutrition_engine.services.extra_meals import ExtraMealService
from nutrition_engine.services.foods import FoodItemRepository, FoodItemService
from nutrition_engine.services.meal_logs import MealLogRepository, MealLogService
from nutrition_engine.services.plans import (
    NutritionPlanRepository,
    NutritionPlanService,
)

LOG_DATE = date(2024, 1, 1)


def make_food(  # noqa: PLR0913
    name: str = "Chicken Breast",
    calories: float = 165.0,
    protein: float = 31.0,
    carbs: float = 0.0,
    fat: float = 3.6,
    **kwargs: object,
) -> FoodItem:
    return FoodItem(
        id=kwargs.pop("id", uuid4()),  # type: ignore[arg-type]
        name=name,
        calories_per_100g=calories,
        protein_per_100g=protein,
        carbs_per_100g=carbs,
        fat_per_100g=fat,
        **kwargs,  # type: ignore[arg-type]
    )


def make_meal(  # noqa: PLR0913
    plan_id: UUID,
    name: str,
    lines: list[tuple[FoodItem, float, str]] | None = None,
    order_in_plan: int = 0,
    day_type: str | None = None,
    time_suggestion: time | None = None,
) -> Meal:
    return Meal(
        id=uuid4(),
        nutrition_plan_id=plan_id,
        name=name,
        order_in_plan=order_in_plan,
        day_type=day_type,
        time_suggestion=time_suggestion,
        food_items=tuple(
            MealFoodItem(
                id=uuid4(),
                food_item_id=food.id,
                food_item=food,
                quantity=quantity,
                unit=unit,
            )
            for food, quantity, unit in lines or []
        ),
    )


def make_plan(plan_id: UUID, meals: list[Meal], **kwargs: object) -> NutritionPlan:
    return NutritionPlan(
        id=plan_id,
        name=str(kwargs.pop("name", "Cut Phase")),
        meals=tuple(meals),
        **kwargs,  # type: ignore[arg-type]
    )


def fixed_clock(hour: int, minute: int = 0, day: date = LOG_DATE):
    """Return a clock callable frozen at the given UTC time."""
    frozen = datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)
    return lambda: frozen


@dataclass
class InMemoryFoodItemRepository(FoodItemRepository):
    """In-memory food item repository for tests."""

    items: dict[UUID, FoodItem] = field(default_factory=dict)
    fail_on_create: bool = False
    created: list[FoodItem] = field(default_factory=list)

    def add(self, item: FoodItem) -> FoodItem:
        assert item.id is not None
        self.items[item.id] = item
        return item

    def create_food_item(self, item: FoodItem) -> FoodItem:
        if self.fail_on_create:
            raise StoreError("Failed to create food item")
        stored = replace(item, id=uuid4())
        self.items[stored.id] = stored
        self.created.append(stored)
        return stored

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        return self.items.get(food_item_id)

    def get_by_barcode(self, barcode: str) -> FoodItem | None:
        for item in self.items.values():
            if item.barcode == barcode:
                return item
        return None

    def search_food_items(self, words: list[str], limit: int) -> list[FoodItem]:
        matches = [
            item
            for item in self.items.values()
            if all(word.lower() in item.name.lower() for word in words)
        ]
        return matches[:limit]


@dataclass
class InMemoryNutritionPlanRepository(NutritionPlanRepository):
    """In-memory plan repository for tests."""

    plans: dict[UUID, NutritionPlan] = field(default_factory=dict)
    assignments: dict[UUID, UUID] = field(default_factory=dict)

    def add(self, plan: NutritionPlan) -> NutritionPlan:
        self.plans[plan.id] = plan
        return plan

    def get_plan(self, plan_id: UUID) -> NutritionPlan | None:
        return self.plans.get(plan_id)

    def get_meal(self, meal_id: UUID) -> Meal | None:
        for plan in self.plans.values():
            meal = plan.get_meal(meal_id)
            if meal is not None:
                return meal
        return None

    def get_assigned_plan_id(self, user_id: UUID) -> UUID | None:
        return self.assignments.get(user_id)


@dataclass
class InMemoryMealLogRepository(MealLogRepository):
    """In-memory meal log repository that joins planned meals on read."""

    plan_repository: InMemoryNutritionPlanRepository | None = None
    logs: dict[UUID, LoggedMeal] = field(default_factory=dict)
    fail_on_create_log: bool = False
    fail_on_create_items: bool = False
    fail_on_list: bool = False
    fail_on_delete: bool = False
    writes: int = 0
    deleted: list[UUID] = field(default_factory=list)

    def create_meal_log(  # noqa: PLR0913
        self,
        user_id: UUID,
        nutrition_plan_id: UUID | None,
        name: str,
        log_date: date,
        log_time: time,
        day_type: str | None,
        is_extra_meal: bool,
        meal_id: UUID | None = None,
        notes: str | None = None,
    ) -> LoggedMeal:
        if self.fail_on_create_log:
            raise StoreError("Failed to create meal log")
        self.writes += 1
        log = LoggedMeal(
            id=uuid4(),
            user_id=user_id,
            nutrition_plan_id=nutrition_plan_id,
            name=name,
            date=log_date,
            time=log_time,
            day_type=day_type,
            is_extra_meal=is_extra_meal,
            meal_id=meal_id,
            notes=notes,
        )
        self.logs[log.id] = log
        return log

    def create_logged_food_items(
        self, meal_log_id: UUID, items: list[LoggedFoodItem]
    ) -> None:
        if self.fail_on_create_items:
            raise StoreError("Failed to create extra meal food items")
        self.writes += 1
        stored = tuple(
            replace(item, id=uuid4(), meal_log_id=meal_log_id) for item in items
        )
        log = self.logs[meal_log_id]
        self.logs[meal_log_id] = replace(log, food_items=log.food_items + stored)

    def list_meal_logs(self, user_id: UUID, log_date: date) -> list[LoggedMeal]:
        if self.fail_on_list:
            raise StoreError("Failed to fetch meal logs")
        logs = [
            log
            for log in self.logs.values()
            if log.user_id == user_id and log.date == log_date
        ]
        logs.sort(key=lambda log: log.time)
        return [self._join_meal(log) for log in logs]

    def delete_meal_log(self, meal_log_id: UUID) -> None:
        if self.fail_on_delete:
            raise StoreError("Failed to delete meal log")
        self.deleted.append(meal_log_id)
        self.logs.pop(meal_log_id, None)

    def is_meal_logged(self, user_id: UUID, meal_id: UUID, log_date: date) -> bool:
        return any(
            log.user_id == user_id and log.meal_id == meal_id and log.date == log_date
            for log in self.logs.values()
        )

    def _join_meal(self, log: LoggedMeal) -> LoggedMeal:
        if log.meal_id is None or self.plan_repository is None:
            return log
        return replace(log, meal=self.plan_repository.get_meal(log.meal_id))


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake Open Food Facts client with in-memory products."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    failures: int = 0
    calls: int = 0

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise httpx.ConnectError("connection refused")
        return self.products.get(barcode)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test.service.key",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def food_repository() -> InMemoryFoodItemRepository:
    return InMemoryFoodItemRepository()


@pytest.fixture
def plan_repository() -> InMemoryNutritionPlanRepository:
    return InMemoryNutritionPlanRepository()


@pytest.fixture
def meal_log_repository(
    plan_repository: InMemoryNutritionPlanRepository,
) -> InMemoryMealLogRepository:
    return InMemoryMealLogRepository(plan_repository=plan_repository)


@pytest.fixture
def open_food_facts() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def food_service(
    food_repository: InMemoryFoodItemRepository,
    open_food_facts: FakeOpenFoodFactsClient,
) -> FoodItemService:
    return FoodItemService(
        repository=food_repository,
        open_food_facts=open_food_facts,
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )


@pytest.fixture
def plan_service(
    plan_repository: InMemoryNutritionPlanRepository,
) -> NutritionPlanService:
    return NutritionPlanService(plan_repository)


@pytest.fixture
def meal_log_service(
    meal_log_repository: InMemoryMealLogRepository,
    plan_service: NutritionPlanService,
) -> MealLogService:
    return MealLogService(
        repository=meal_log_repository,
        plan_service=plan_service,
        clock=fixed_clock(13),
    )


@pytest.fixture
def extra_meal_service(
    meal_log_repository: InMemoryMealLogRepository,
    food_service: FoodItemService,
) -> ExtraMealService:
    return ExtraMealService(
        repository=meal_log_repository,
        food_service=food_service,
        clock=fixed_clock(15, 30),
    )
