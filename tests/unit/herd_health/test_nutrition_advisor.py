"""Tests for species-based nutrition planning."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from herd_health.services.nutrition_advisor import (
    BASE_CALORIE_RATES,
    FEEDING_SCHEDULES,
    age_multiplier,
    generate_nutrition_plan,
    protein_requirement,
    round_half_up,
)


def test_adult_cow_plan() -> None:
    plan = generate_nutrition_plan("cow", weight=500, age=3)

    assert plan.daily_calories == 1250
    assert plan.protein_requirement == 60.0
    assert plan.feed_type == "Maintenance feed with optimal energy levels"
    assert plan.supplements == ["Calcium supplement", "Mineral block"]
    assert plan.feeding_schedule == [
        "06:00 - Morning feed",
        "12:00 - Midday grazing",
        "18:00 - Evening feed",
    ]


def test_young_lamb_gets_developmental_and_mineral_supplements() -> None:
    plan = generate_nutrition_plan("sheep", weight=20, age=0.4)

    assert plan.daily_calories == 73  # 20 * 2.8 * 1.3 = 72.8
    assert plan.protein_requirement == 2.8
    assert plan.feed_type == "Starter feed with high protein content"
    assert plan.supplements == [
        "Vitamin D3 for bone development",
        "Probiotics for digestive health",
        "Calcium supplement",
        "Mineral block",
    ]


def test_senior_horse() -> None:
    plan = generate_nutrition_plan("horse", weight=450, age=12)

    assert plan.daily_calories == 891  # 450 * 2.2 * 0.9
    assert plan.protein_requirement == 45.0
    assert plan.supplements == []
    assert plan.feeding_schedule[0] == "06:00 - Morning hay"


def test_grower_pig() -> None:
    plan = generate_nutrition_plan("pig", weight=80, age=1.5)

    assert plan.feed_type == "Grower feed with balanced nutrients"
    assert plan.daily_calories == 240
    assert plan.protein_requirement == 12.8


def test_unknown_species_falls_back_to_cow() -> None:
    plan = generate_nutrition_plan("unknown-species", weight=100, age=3)
    cow = generate_nutrition_plan("cow", weight=100, age=3)

    assert plan.daily_calories == 250
    assert plan.protein_requirement == 12.0
    assert plan.feeding_schedule == cow.feeding_schedule
    # Mineral supplements are for real cows and sheep only
    assert plan.supplements == []


def test_species_lookup_is_case_insensitive() -> None:
    assert generate_nutrition_plan("Goat", 60, 3) == generate_nutrition_plan("goat", 60, 3)


@pytest.mark.parametrize(
    "age,expected", [(0.0, 1.3), (0.99, 1.3), (1.0, 1.0), (5.0, 1.0), (5.01, 0.9)]
)
def test_age_multiplier_bands(age: float, expected: float) -> None:
    assert age_multiplier(age) == expected


def test_protein_halfway_value_rounds_up() -> None:
    # 1.25 kg x 0.10 is exactly 0.125
    assert protein_requirement("horse", 1.25) == 0.13


@pytest.mark.parametrize(
    "value,ndigits,expected", [(0.5, 0, 1.0), (2.5, 0, 3.0), (0.125, 2, 0.13)]
)
def test_round_half_up(value: float, ndigits: int, expected: float) -> None:
    assert round_half_up(value, ndigits) == expected


@pytest.mark.parametrize("weight,age", [(0, 2), (-5, 2), (100, -1)])
def test_invalid_inputs_are_rejected(weight: float, age: float) -> None:
    with pytest.raises(ValueError):
        generate_nutrition_plan("cow", weight, age)


def test_feeding_schedule_is_a_copy() -> None:
    plan = generate_nutrition_plan("chicken", 2, 1)
    plan.feeding_schedule.append("22:00 - Extra")

    assert len(FEEDING_SCHEDULES["chicken"]) == 3
    assert len(generate_nutrition_plan("chicken", 2, 1).feeding_schedule) == 3


@given(
    species=st.sampled_from(sorted(BASE_CALORIE_RATES)) | st.text(max_size=20),
    weight=st.floats(min_value=0.001, max_value=5000.0),
    age=st.floats(min_value=0.0, max_value=40.0),
)
def test_plan_is_total_and_positive(species: str, weight: float, age: float) -> None:
    plan = generate_nutrition_plan(species, weight, age)

    assert plan.daily_calories > 0
    assert plan.protein_requirement >= 0
    assert plan.feed_type
    assert len(plan.feeding_schedule) == 3
    assert len(plan.supplements) == len(set(plan.supplements))
    assert plan == generate_nutrition_plan(species, weight, age)
