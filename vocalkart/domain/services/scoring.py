"""
Nutrition-distance ranking of domestic candidates.

The distance is a weighted sum of absolute per-100g differences in energy,
sugar and fat. Values are taken as reported: products whose nutrition is
declared per serving instead of per 100g are not comparable, and nothing
here tries to convert them.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence
import math

from vocalkart.domain.models.product import Product, ScoredCandidate
from vocalkart.domain.services.constants import WEIGHT_ENERGY, WEIGHT_SUGAR, WEIGHT_FAT


@dataclass(frozen=True)
class NutritionWeights:
    energy: float = WEIGHT_ENERGY
    sugar: float = WEIGHT_SUGAR
    fat: float = WEIGHT_FAT

    @classmethod
    def from_settings(cls, settings) -> "NutritionWeights":
        return cls(
            energy=settings.nutrition_weight_energy,
            sugar=settings.nutrition_weight_sugar,
            fat=settings.nutrition_weight_fat,
        )


DEFAULT_WEIGHTS = NutritionWeights()


def _value(nutriments: Optional[Mapping[str, Any]], key: str) -> float:
    """Numeric nutrient value, 0 when absent, nested or not a finite number."""
    if not nutriments:
        return 0.0
    val = nutriments.get(key)
    if val is None:
        val = nutriments.get(key.replace("-", "_"))
    if val is None or isinstance(val, (dict, list, bool)):
        return 0.0
    try:
        num = float(val)
    except (TypeError, ValueError):
        return 0.0
    return num if math.isfinite(num) else 0.0


def _energy(n: Optional[Mapping[str, Any]]) -> float:
    return _value(n, "energy-kcal_100g") or _value(n, "energy_100g")


def nutrition_distance(
    a: Optional[Mapping[str, Any]],
    b: Optional[Mapping[str, Any]],
    weights: NutritionWeights = DEFAULT_WEIGHTS,
) -> float:
    return (
        weights.energy * abs(_energy(a) - _energy(b))
        + weights.sugar * abs(_value(a, "sugars_100g") - _value(b, "sugars_100g"))
        + weights.fat * abs(_value(a, "fat_100g") - _value(b, "fat_100g"))
    )


def rank_candidates(
    source_nutriments: Optional[Dict[str, Any]],
    candidates: Sequence[Product],
    *,
    limit: Optional[int] = None,
    weights: NutritionWeights = DEFAULT_WEIGHTS,
) -> List[ScoredCandidate]:
    """Ascending by distance; equal distances keep their input order (sorted() is stable)."""
    scored = [
        ScoredCandidate(product=c, distance=nutrition_distance(source_nutriments, c.nutriments, weights))
        for c in candidates
    ]
    scored.sort(key=lambda s: s.distance)
    return scored[:limit] if limit is not None else scored
