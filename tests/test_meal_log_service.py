"""Tests for planned meal logging and daily aggregation."""

from dataclasses import replace
from datetime import UTC, date, datetime, time
from uuid import uuid4

import pytest

from nutrition_engine.domain.forms import ExtraMealForm, ExtraMealLine
from nutrition_engine.domain.nutrition import NutritionValues
from nutrition_engine.errors import MealNotFoundError, StoreError
from nutrition_engine.services.extra_meals import ExtraMealService
from nutrition_engine.services.meal_logs import UNSPECIFIED_DAY_TYPE, MealLogService
from nutrition_engine.services.plans import NutritionPlanService
from tests.conftest import (
    LOG_DATE,
    InMemoryFoodItemRepository,
    InMemoryMealLogRepository,
    InMemoryNutritionPlanRepository,
    fixed_clock,
    make_food,
    make_meal,
    make_plan,
)


def _lunch_plan(plan_repository: InMemoryNutritionPlanRepository):
    plan_id = uuid4()
    chicken = make_food("Chicken Breast", calories=165, protein=31, carbs=0, fat=3.6)
    lunch = make_meal(
        plan_id,
        "Lunch",
        lines=[(chicken, 150, "g")],
        day_type="Training",
        time_suggestion=time(12, 0),
    )
    return plan_repository.add(
        make_plan(plan_id, [lunch], total_calories=2000, protein_grams=150)
    )


def test_lunch_scenario_end_to_end(
    plan_repository: InMemoryNutritionPlanRepository,
    meal_log_repository: InMemoryMealLogRepository,
    plan_service: NutritionPlanService,
    user_id,
) -> None:
    plan = _lunch_plan(plan_repository)
    lunch = plan.meals[0]
    assert lunch.total_calories == 248
    assert lunch.total_protein == 46.5

    before = MealLogService(
        meal_log_repository, plan_service, clock=fixed_clock(12, 30)
    )
    missed = before.find_missed_meals(user_id, plan)
    assert [meal.name for meal in missed] == ["Lunch"]

    after = MealLogService(meal_log_repository, plan_service, clock=fixed_clock(13))
    logged = after.log_planned_meal(user_id, lunch.id, LOG_DATE)
    assert logged.time == time(13, 0)
    assert logged.day_type == "Training"

    daily = after.build_daily_log(user_id, LOG_DATE, plan)
    assert daily.is_meal_logged(lunch.id)
    assert daily.consumed.calories == 248
    assert daily.planned.calories == 248
    assert daily.remaining.calories == 0
    assert after.find_missed_meals(
        user_id, plan, datetime(2024, 1, 1, 12, 30, tzinfo=UTC)
    ) == ()


def test_daily_totals_sum_logged_meals(
    plan_repository: InMemoryNutritionPlanRepository,
    meal_log_service: MealLogService,
    user_id,
) -> None:
    plan_id = uuid4()
    oats = make_food("Oats", calories=300, protein=20, carbs=30, fat=10)
    salmon = make_food("Salmon", calories=500, protein=40, carbs=50, fat=20)
    breakfast = make_meal(plan_id, "Breakfast", [(oats, 100, "g")], order_in_plan=0)
    dinner = make_meal(plan_id, "Dinner", [(salmon, 100, "g")], order_in_plan=1)
    plan = plan_repository.add(make_plan(plan_id, [breakfast, dinner]))

    meal_log_service.log_planned_meal(user_id, breakfast.id, LOG_DATE)
    meal_log_service.log_planned_meal(user_id, dinner.id, LOG_DATE)
    daily = meal_log_service.build_daily_log(user_id, LOG_DATE, plan)

    assert len(daily.logged_meals) == 2
    assert daily.consumed == NutritionValues(800, 60, 80, 30)
    assert daily.day_type is None
    assert daily.targets is None
    assert daily.logged_meals[0].log.day_type == UNSPECIFIED_DAY_TYPE


def test_planned_nutrition_follows_current_meal_definition(
    plan_repository: InMemoryNutritionPlanRepository,
    meal_log_service: MealLogService,
    user_id,
) -> None:
    plan_id = uuid4()
    rice = make_food("Rice", calories=130, protein=2.7, carbs=28, fat=0.3)
    meal = make_meal(plan_id, "Dinner", [(rice, 100, "g")])
    plan = plan_repository.add(make_plan(plan_id, [meal]))
    meal_log_service.log_planned_meal(user_id, meal.id, LOG_DATE)

    resized = make_meal(plan_id, "Dinner", [(rice, 200, "g")])
    edited_meal = replace(meal, food_items=resized.food_items)
    plan_repository.add(make_plan(plan_id, [edited_meal]))

    daily = meal_log_service.build_daily_log(user_id, LOG_DATE, plan)

    assert daily.consumed.calories == 260


def test_deleted_meal_counts_as_zero(
    plan_repository: InMemoryNutritionPlanRepository,
    meal_log_service: MealLogService,
    user_id,
) -> None:
    plan_id = uuid4()
    meal = make_meal(plan_id, "Snack", [(make_food(), 100, "g")])
    plan = plan_repository.add(make_plan(plan_id, [meal]))
    meal_log_service.log_planned_meal(user_id, meal.id, LOG_DATE)
    plan_repository.add(make_plan(plan_id, []))

    daily = meal_log_service.build_daily_log(user_id, LOG_DATE, plan)

    assert daily.consumed == NutritionValues(0, 0, 0, 0)
    assert daily.is_meal_logged(meal.id)


def test_day_type_taken_from_logs(
    plan_repository: InMemoryNutritionPlanRepository,
    meal_log_service: MealLogService,
    user_id,
) -> None:
    plan_id = uuid4()
    rest = make_meal(plan_id, "Rest Breakfast", [(make_food(), 100, "g")], 0, "Rest")
    train = make_meal(plan_id, "Train Breakfast", [(make_food(), 200, "g")], 1, "Train")
    plan = plan_repository.add(make_plan(plan_id, [rest, train]))
    meal_log_service.log_planned_meal(user_id, train.id, LOG_DATE)

    daily = meal_log_service.build_daily_log(user_id, LOG_DATE, plan)
    assert daily.day_type == "Train"
    assert [meal.name for meal in daily.planned_meals] == ["Train Breakfast"]

    requested = meal_log_service.build_daily_log(user_id, LOG_DATE, plan, "Rest")
    assert requested.day_type == "Rest"
    assert requested.planned.calories == 165


def test_log_unknown_meal_raises(meal_log_service: MealLogService, user_id) -> None:
    with pytest.raises(MealNotFoundError):
        meal_log_service.log_planned_meal(user_id, uuid4(), LOG_DATE)


def test_unlog_and_range(
    plan_repository: InMemoryNutritionPlanRepository,
    meal_log_service: MealLogService,
    user_id,
) -> None:
    plan_id = uuid4()
    meal = make_meal(plan_id, "Lunch", [(make_food(), 100, "g")])
    plan = plan_repository.add(make_plan(plan_id, [meal]))
    logged = meal_log_service.log_planned_meal(user_id, meal.id, LOG_DATE)
    assert meal_log_service.is_meal_logged(user_id, meal.id, LOG_DATE)

    days = meal_log_service.build_daily_logs(
        user_id, LOG_DATE, date(2024, 1, 3), plan
    )
    assert [day.date.day for day in days] == [1, 2, 3]
    assert days[0].consumed.calories == 165
    assert days[1].consumed.calories == 0

    meal_log_service.delete_logged_meal(logged.id)
    assert not meal_log_service.is_meal_logged(user_id, meal.id, LOG_DATE)


def test_user_plan_and_day_type_targets(
    plan_repository: InMemoryNutritionPlanRepository,
    plan_service: NutritionPlanService,
    user_id,
) -> None:
    plan = _lunch_plan(plan_repository)
    plan_repository.assignments[user_id] = plan.id

    assert plan_service.get_user_plan(user_id) == plan
    assert plan_service.get_user_plan(uuid4()) is None
    targets = plan_service.day_type_targets(plan, "Training")
    assert targets.calories == 248
    assert plan.targets is not None
    assert plan.targets.calories == 2000
    assert plan.targets.fat_grams is None


def test_extra_meal_with_planned_name_does_not_log_the_meal(
    plan_repository: InMemoryNutritionPlanRepository,
    food_repository: InMemoryFoodItemRepository,
    meal_log_service: MealLogService,
    extra_meal_service: ExtraMealService,
    user_id,
) -> None:
    plan = _lunch_plan(plan_repository)
    lunch = plan.meals[0]
    chicken = food_repository.add(make_food())
    form = ExtraMealForm(
        name="Lunch",
        day_type="Training",
        food_items=[
            ExtraMealLine(food_item_id=str(chicken.id), quantity=150, unit="g")
        ],
    )
    extra_meal_service.log_extra_meal(user_id, plan.id, form, LOG_DATE)

    daily = meal_log_service.build_daily_log(user_id, LOG_DATE, plan)
    missed = meal_log_service.find_missed_meals(
        user_id, plan, datetime(2024, 1, 1, 12, 30, tzinfo=UTC)
    )

    assert daily.consumed.calories == 248
    assert not daily.is_meal_logged(lunch.id)
    assert [meal.name for meal in missed] == ["Lunch"]


def test_fetch_failure_surfaces_to_caller(
    plan_repository: InMemoryNutritionPlanRepository,
    meal_log_repository: InMemoryMealLogRepository,
    meal_log_service: MealLogService,
    user_id,
) -> None:
    plan = _lunch_plan(plan_repository)
    meal_log_repository.fail_on_list = True

    with pytest.raises(StoreError):
        meal_log_service.build_daily_log(user_id, LOG_DATE, plan)
