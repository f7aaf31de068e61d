"""Nutrition estimation collaborators used to resolve fixed and custom meal slots."""
import logging
from typing import Optional

import httpx

from mealplan.domain.Nutrition import NutritionVector
from mealplan.logic.planning.schemas import EstimateOut, NutritionOut
from mealplan.utilities.config import NUTRITION_ESTIMATOR, SPOONACULAR_API_KEY
from mealplan.utilities.errors import EstimationError

logger = logging.getLogger(__name__)

SPOONACULAR_GUESS_URL = "https://api.spoonacular.com/recipes/guessNutrition"


class LLMNutritionEstimator:
    def __init__(self, generator):
        self.generator = generator

    async def estimate(self, description: str, daily_target: NutritionVector) -> EstimateOut:
        payload = {
            "task": "estimate",
            "description": description,
            "dailyTarget": daily_target.to_dict(),
        }
        return await self.generator.generate(payload, EstimateOut)


class SpoonacularNutritionEstimator:
    """Uses Spoonacular's guessNutrition endpoint; the dish title is kept as given."""

    def __init__(self, api_key: str = SPOONACULAR_API_KEY, client: Optional[httpx.AsyncClient] = None,
                 timeout: float = 10.0):
        self.api_key = api_key
        self.client = client
        self.timeout = timeout

    async def estimate(self, description: str, daily_target: NutritionVector) -> EstimateOut:
        if not self.api_key:
            raise EstimationError("SPOONACULAR_API_KEY not set")
        params = {"title": description, "apiKey": self.api_key}
        try:
            if self.client is not None:
                response = await self.client.get(SPOONACULAR_GUESS_URL, params=params, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(SPOONACULAR_GUESS_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise EstimationError(f"Spoonacular request failed: {e}") from e
        if not isinstance(data, dict):
            raise EstimationError("Unexpected Spoonacular response")

        def value(key: str) -> float:
            entry = data.get(key) or {}
            return entry.get("value", 0) if isinstance(entry, dict) else 0

        nutrition = NutritionOut(calories=value("calories"), protein=value("protein"),
                                 fat=value("fat"), carbs=value("carbs"))
        if nutrition.calories <= 0:
            raise EstimationError(f"Spoonacular could not estimate '{description}'")
        return EstimateOut(resolved_title=description, nutrition=nutrition, reason="Spoonacular guessNutrition")


def make_estimator(generator, kind: str = NUTRITION_ESTIMATOR):
    if kind == "spoonacular":
        return SpoonacularNutritionEstimator()
    if kind != "llm":
        logger.warning("Unknown NUTRITION_ESTIMATOR %r; using the generation service", kind)
    return LLMNutritionEstimator(generator)
