"""
Trend aggregation over an animal's recent health observations.

Reduces a time-ordered observation history to the summary features the risk
classifier consumes. Pure functions only: no shared state, safe to call
concurrently for different animals.
"""

from collections.abc import Sequence
from statistics import fmean

import structlog

from herd_health.domain.models import HealthObservation, TrendFeatures

logger = structlog.get_logger(__name__)

DEFAULT_WINDOW_SIZE = 10


class EmptyObservationWindowError(ValueError):
    """Raised when features are requested for an animal with no observations."""

    def __init__(self, animal_id: str | None = None) -> None:
        self.animal_id = animal_id
        target = f"animal {animal_id!r}" if animal_id else "an empty observation list"
        super().__init__(f"Cannot score health trends for {target}: no observations recorded")


def recent_window(
    observations: Sequence[HealthObservation], window_size: int = DEFAULT_WINDOW_SIZE
) -> Sequence[HealthObservation]:
    """Return the most recent ``window_size`` observations, oldest first."""
    if window_size <= 0:
        raise ValueError(f"window_size must be positive, got {window_size}")
    return observations[-window_size:]


def relative_change(first: float, last: float) -> float:
    """Fractional change from ``first`` to ``last``."""
    return (last - first) / first


def aggregate_trends(
    observations: Sequence[HealthObservation], window_size: int = DEFAULT_WINDOW_SIZE
) -> TrendFeatures:
    """
    Summarize the recent window of one animal's observations.

    ``observations`` must be ordered by timestamp, oldest first. Decline and
    weight trend compare the oldest and newest entries of the window and are 0
    when the window holds fewer than two entries.

    Raises:
        EmptyObservationWindowError: if ``observations`` is empty.
        ValueError: if ``observations`` belong to more than one animal.
    """
    if not observations:
        raise EmptyObservationWindowError()

    animal_ids = {o.animal_id for o in observations}
    if len(animal_ids) > 1:
        raise ValueError(f"observations span multiple animals: {sorted(animal_ids)}")

    window = recent_window(observations, window_size)
    animal_id = window[-1].animal_id
    first, last = window[0], window[-1]

    if len(window) < 2:
        health_decline = 0.0
        weight_trend = 0.0
    else:
        # A score dropping from 0 has nowhere to decline to
        health_decline = (
            -relative_change(first.health_score, last.health_score) if first.health_score else 0.0
        )
        weight_trend = relative_change(first.weight, last.weight)

    temperatures = [o.temperature for o in window if o.temperature is not None]

    features = TrendFeatures(
        animal_id=animal_id,
        observation_count=len(window),
        avg_health_score=fmean(o.health_score for o in window),
        health_decline=health_decline,
        weight_trend=weight_trend,
        avg_temperature=fmean(temperatures) if temperatures else None,
    )

    logger.debug(
        "trend_features_computed",
        animal_id=animal_id,
        window=len(window),
        avg_health_score=round(features.avg_health_score, 2),
        health_decline=round(features.health_decline, 4),
        weight_trend=round(features.weight_trend, 4),
    )
    return features
