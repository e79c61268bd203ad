"""
Service that ties observation intake to scoring and alerting.

Pipeline per observation:
1. Record it in the animal's time-ordered history
2. Recompute trend features over the recent window
3. Classify risk
4. Raise a health alert for elevated risk
"""

import bisect
from collections import defaultdict

import structlog

from herd_health.adapters.storage import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from herd_health.config import AppConfig, get_config
from herd_health.domain.models import (
    HealthObservation,
    HealthPrediction,
    Notification,
    NutritionPlan,
)
from herd_health.services.alerts import alert_from_prediction
from herd_health.services.dispatch import NotificationSender
from herd_health.services.notification_store import NotificationStore, NotificationStoreConfig
from herd_health.services.nutrition_advisor import generate_nutrition_plan
from herd_health.services.risk_classifier import predict_health_risks
from herd_health.services.trend_aggregator import DEFAULT_WINDOW_SIZE, EmptyObservationWindowError

logger = structlog.get_logger(__name__)


class HerdHealthService:
    """Owns observation histories and the notification store for one farm."""

    def __init__(
        self,
        notification_store: NotificationStore | None = None,
        window_size: int = DEFAULT_WINDOW_SIZE,
    ) -> None:
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self.notification_store = notification_store or NotificationStore()
        self.window_size = window_size
        self.logger = logger.bind(component="herd_health_service")
        self._histories: defaultdict[str, list[HealthObservation]] = defaultdict(list)

    @classmethod
    def from_config(
        cls, config: AppConfig | None = None, sender: NotificationSender | None = None
    ) -> "HerdHealthService":
        config = config or get_config()
        storage: KeyValueStore
        if config.notifications.storage_dir is not None:
            storage = JsonFileKeyValueStore(config.notifications.storage_dir)
        else:
            storage = InMemoryKeyValueStore()

        store = NotificationStore(
            sender=sender,
            config=NotificationStoreConfig(
                dispatch_timeout_seconds=config.notifications.dispatch_timeout_seconds,
                storage_key=config.notifications.storage_key,
            ),
            storage=storage,
        )
        return cls(notification_store=store, window_size=config.health.window_size)

    @property
    def animal_ids(self) -> list[str]:
        return [animal_id for animal_id, history in self._histories.items() if history]

    def record_observation(self, observation: HealthObservation) -> None:
        """Add an observation, keeping the animal's history ordered by timestamp."""
        history = self._histories[observation.animal_id]
        # insort_right keeps arrival order among equal timestamps
        bisect.insort_right(history, observation, key=lambda o: o.timestamp)
        self.logger.debug(
            "observation_recorded",
            animal_id=observation.animal_id,
            history_length=len(history),
        )

    def observations(self, animal_id: str) -> list[HealthObservation]:
        return list(self._histories.get(animal_id, ()))

    def predict(self, animal_id: str) -> HealthPrediction:
        """
        Score an animal's current risk from its recent observations.

        Raises:
            EmptyObservationWindowError: if nothing has been recorded for the animal.
        """
        history = self._histories.get(animal_id)
        if not history:
            raise EmptyObservationWindowError(animal_id)
        return predict_health_risks(history, self.window_size)

    def predict_all(self) -> dict[str, HealthPrediction]:
        return {animal_id: self.predict(animal_id) for animal_id in self.animal_ids}

    async def record_and_alert(
        self, observation: HealthObservation, animal_name: str | None = None
    ) -> tuple[HealthPrediction, Notification | None]:
        """Record an observation, rescore the animal and alert on elevated risk."""
        self.record_observation(observation)
        prediction = self.predict(observation.animal_id)
        notification = await alert_from_prediction(
            self.notification_store, prediction, animal_name=animal_name
        )
        return prediction, notification

    def nutrition_plan(self, species: str, weight: float, age: float) -> NutritionPlan:
        return generate_nutrition_plan(species, weight, age)
