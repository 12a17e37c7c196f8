"""Food item creation, search, and barcode lookup."""

import asyncio
import logging
import math
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_engine.adapters.open_food_facts_client import OpenFoodFactsClient
from nutrition_engine.domain.foods import BarcodeLookup, FoodItem, FoodSource
from nutrition_engine.domain.forms import CustomFoodItemForm
from nutrition_engine.services.cache import NOT_FOUND, Cache
from nutrition_engine.services.units import DEFAULT_SERVING_SIZE_G

_SERVING_SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*g", re.IGNORECASE)

_logger = logging.getLogger(__name__)


class FoodItemRepository(Protocol):
    """Persistence interface for food items."""

    def create_food_item(self, item: FoodItem) -> FoodItem:
        """Insert a food item and return the stored row."""

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id, if present."""

    def get_by_barcode(self, barcode: str) -> FoodItem | None:
        """Return the food item carrying a barcode, if present."""

    def search_food_items(self, words: list[str], limit: int) -> list[FoodItem]:
        """Return food items whose name contains every word."""


@dataclass
class FoodItemService:
    """Service for the shared food item catalogue."""

    repository: FoodItemRepository
    open_food_facts: OpenFoodFactsClient
    cache: Cache
    barcode_ttl_seconds: int = 86400
    miss_ttl_seconds: int = 3600
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    def create_custom_food(
        self, user_id: UUID, form: CustomFoodItemForm
    ) -> FoodItem:
        """Persist a user-defined food item."""
        return self.repository.create_food_item(
            custom_food_from_form(form, created_by=user_id)
        )

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id."""
        return self.repository.get_food_item(food_item_id)

    def search(self, query: str, limit: int = 20) -> list[FoodItem]:
        """Search foods whose name contains every word of the query."""
        words = [word for word in query.split() if word]
        if not words:
            return []
        items = self.repository.search_food_items(words, limit)
        return sorted(items, key=lambda item: item.name.lower())[:limit]

    async def get_by_barcode(self, barcode: str) -> BarcodeLookup | None:
        """Look a barcode up locally, then in Open Food Facts.

        Products found remotely are saved for later lookups. When saving fails
        the unsaved item is still returned.
        """
        code = barcode.strip()
        if not code:
            return None
        local = self.repository.get_by_barcode(code)
        if local is not None:
            return BarcodeLookup(item=local, origin="local", persisted=True)

        product = await self._fetch_product(code)
        if product is None:
            _logger.info("Barcode not found: barcode=%s", code)
            return None

        item = food_item_from_product(product, code)
        try:
            saved = self.repository.create_food_item(item)
        except Exception:
            _logger.warning(
                "Failed to save Open Food Facts product, returning unsaved item: "
                "barcode=%s",
                code,
                exc_info=True,
            )
            return BarcodeLookup(item=item, origin="open_food_facts", persisted=False)
        return BarcodeLookup(item=saved, origin="open_food_facts", persisted=True)

    async def _fetch_product(self, barcode: str) -> dict[str, object] | None:
        cache_key = f"off:product:{barcode}"
        cached = self.cache.get(cache_key)
        if cached is NOT_FOUND:
            return None
        if isinstance(cached, dict):
            return cached

        product = await self._call_with_retry(
            lambda: self.open_food_facts.get_product(barcode),
            action=f"get_product:{barcode}",
        )
        if product is None:
            self.cache.set(cache_key, NOT_FOUND, ttl_seconds=self.miss_ttl_seconds)
        else:
            self.cache.set(cache_key, product, ttl_seconds=self.barcode_ttl_seconds)
        return product

    async def _call_with_retry(
        self,
        func: Callable[[], Awaitable[dict[str, object] | None]],
        *,
        action: str,
    ) -> dict[str, object] | None:
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Open Food Facts %s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def custom_food_from_form(
    form: CustomFoodItemForm, created_by: UUID | None
) -> FoodItem:
    """Build an unsaved custom food item from form values."""
    return FoodItem(
        id=None,
        name=form.food_name.strip(),
        calories_per_100g=form.calories_per_100g,
        protein_per_100g=form.protein_per_100g,
        carbs_per_100g=form.carbs_per_100g,
        fat_per_100g=form.fat_per_100g,
        fiber_per_100g=form.fiber_per_100g or 0.0,
        serving_size_g=form.serving_size_g or DEFAULT_SERVING_SIZE_G,
        barcode=form.barcode,
        source=FoodSource.CUSTOM,
        created_by=created_by,
        brand=form.brand,
        nutrient_basis=form.nutrient_basis or "per 100g",
        is_verified=False,
    )


def food_item_from_product(product: dict[str, object], barcode: str) -> FoodItem:
    """Convert an Open Food Facts product into an unsaved food item."""
    nutriments = product.get("nutriments") or {}
    if not isinstance(nutriments, dict):
        nutriments = {}
    calories = _nutriment(nutriments, "energy-kcal")
    protein = _nutriment(nutriments, "proteins")
    carbs = _nutriment(nutriments, "carbohydrates")
    fat = _nutriment(nutriments, "fat")
    fiber = _nutriment(nutriments, "fiber")

    brand = product.get("brands") or None
    name = str(product.get("product_name") or "Unknown Product")
    if brand:
        name = f"{brand} - {name}"

    return FoodItem(
        id=None,
        name=name,
        calories_per_100g=float(math.floor(calories + 0.5)),
        protein_per_100g=_one_decimal(protein),
        carbs_per_100g=_one_decimal(carbs),
        fat_per_100g=_one_decimal(fat),
        fiber_per_100g=_one_decimal(fiber),
        serving_size_g=parse_serving_size(product.get("serving_size")),
        barcode=barcode,
        source=FoodSource.EXTERNAL_DATABASE,
        brand=str(brand) if brand else None,
        is_verified=False,
    )


def parse_serving_size(raw: object) -> float:
    """Extract grams from a free-text serving size such as '30 g (2 biscuits)'."""
    if isinstance(raw, str):
        match = _SERVING_SIZE_PATTERN.search(raw)
        if match:
            return float(match.group(1))
    return DEFAULT_SERVING_SIZE_G


def _nutriment(nutriments: dict[str, object], key: str) -> float:
    """Prefer the per-100g value, falling back to the per-product value."""
    for candidate in (f"{key}_100g", key):
        value = nutriments.get(candidate)
        if isinstance(value, int | float) and value:
            return max(float(value), 0.0)
        if isinstance(value, str):
            try:
                parsed = float(value)
            except ValueError:
                continue
            if parsed:
                return max(parsed, 0.0)
    return 0.0


def _one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10
