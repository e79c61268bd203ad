"""
Species-based nutrition planning.

Pure lookup plus formula: no time-series input and no state. Unknown species
fall back to the cow tables rather than failing.
"""

import math
from typing import TypeVar

import structlog

from herd_health.domain.models import NutritionPlan

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_SPECIES = "cow"

# kcal per kg of body weight per day
BASE_CALORIE_RATES: dict[str, float] = {
    "cow": 2.5,
    "pig": 3.0,
    "sheep": 2.8,
    "goat": 2.7,
    "horse": 2.2,
    "chicken": 4.5,
}

# kg of protein per kg of body weight per day
PROTEIN_RATES: dict[str, float] = {
    "cow": 0.12,
    "pig": 0.16,
    "sheep": 0.14,
    "goat": 0.13,
    "horse": 0.10,
    "chicken": 0.18,
}

FEEDING_SCHEDULES: dict[str, tuple[str, str, str]] = {
    "cow": ("06:00 - Morning feed", "12:00 - Midday grazing", "18:00 - Evening feed"),
    "pig": ("07:00 - Morning feed", "13:00 - Afternoon feed", "19:00 - Evening feed"),
    "chicken": ("06:30 - Morning feed", "12:30 - Midday feed", "17:30 - Evening feed"),
    "sheep": ("07:30 - Morning feed", "14:00 - Afternoon grazing", "18:30 - Evening feed"),
    "goat": ("07:00 - Morning browse", "13:30 - Afternoon feed", "18:00 - Evening hay"),
    "horse": ("06:00 - Morning hay", "12:00 - Midday pasture", "18:00 - Evening grain"),
}

MINERAL_SUPPLEMENT_SPECIES = frozenset({"cow", "sheep"})


def _lookup(table: dict[str, T], species: str) -> T:
    return table.get(species.strip().lower(), table[DEFAULT_SPECIES])


def age_multiplier(age: float) -> float:
    """Energy multiplier by age in years: growing animals need more, seniors less."""
    if age < 1:
        return 1.3
    if age > 5:
        return 0.9
    return 1.0


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round to ``ndigits`` decimals with halves rounded up."""
    scale = 10**ndigits
    return math.floor(value * scale + 0.5) / scale


def daily_calories(species: str, weight: float, age: float) -> int:
    raw = weight * _lookup(BASE_CALORIE_RATES, species) * age_multiplier(age)
    # Never below 1 kcal
    return max(1, int(round_half_up(raw)))


def protein_requirement(species: str, weight: float) -> float:
    return round_half_up(weight * _lookup(PROTEIN_RATES, species), 2)


def recommend_feed_type(age: float) -> str:
    if age < 0.5:
        return "Starter feed with high protein content"
    if age < 2:
        return "Grower feed with balanced nutrients"
    return "Maintenance feed with optimal energy levels"


def recommend_supplements(species: str, age: float) -> list[str]:
    supplements = []
    if age < 1:
        supplements.append("Vitamin D3 for bone development")
        supplements.append("Probiotics for digestive health")
    if species.strip().lower() in MINERAL_SUPPLEMENT_SPECIES:
        supplements.append("Calcium supplement")
        supplements.append("Mineral block")
    return supplements


def feeding_schedule(species: str) -> list[str]:
    return list(_lookup(FEEDING_SCHEDULES, species))


def generate_nutrition_plan(species: str, weight: float, age: float) -> NutritionPlan:
    """
    Build a daily nutrition plan for one animal.

    Args:
        species: Species name, case-insensitive; unknown species use cow rates
        weight: Body weight in kg, must be positive
        age: Age in years, must not be negative

    Raises:
        ValueError: if weight or age is out of range.
    """
    if weight <= 0:
        raise ValueError(f"weight must be positive, got {weight}")
    if age < 0:
        raise ValueError(f"age must not be negative, got {age}")

    if species.strip().lower() not in BASE_CALORIE_RATES:
        logger.info("unknown_species_defaulted", species=species, default=DEFAULT_SPECIES)

    return NutritionPlan(
        daily_calories=daily_calories(species, weight, age),
        protein_requirement=protein_requirement(species, weight),
        feed_type=recommend_feed_type(age),
        supplements=recommend_supplements(species, age),
        feeding_schedule=feeding_schedule(species),
    )
