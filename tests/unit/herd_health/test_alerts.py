"""Tests for notification helpers and the prediction-to-alert bridge."""

import pytest

from herd_health.domain.models import (
    HealthPrediction,
    NotificationPriority,
    NotificationType,
    RiskLevel,
)
from herd_health.services.alerts import (
    alert_from_prediction,
    create_health_alert,
    create_inventory_alert,
    create_sensor_alert,
    create_task_reminder,
    format_prediction_message,
)
from herd_health.services.notification_store import NotificationStore
from herd_health.services.risk_classifier import timeframe_for


def prediction(risk_level: RiskLevel, issues: list[str] | None = None) -> HealthPrediction:
    issues = issues if issues is not None else ["significant weight loss"]
    return HealthPrediction(
        animal_id="animal_2",
        risk_level=risk_level,
        confidence=0.75,
        predicted_issues=issues,
        recommendations=["review feeding/nutrition"] if issues else [],
        timeframe=timeframe_for(risk_level),
    )


@pytest.fixture
def store() -> NotificationStore:
    return NotificationStore()


async def test_health_alert_defaults(store: NotificationStore) -> None:
    notification = await create_health_alert(store, "animal_1", "Health Alert: Bella", "Fever")

    assert notification is not None
    assert notification.type == NotificationType.HEALTH
    assert notification.priority == NotificationPriority.HIGH
    assert notification.action_required is True
    assert notification.animal_id == "animal_1"


@pytest.mark.parametrize(
    "setting,factory,args,expected_type",
    [
        ("healthAlerts", create_health_alert, ("animal_1", "t", "m"), NotificationType.HEALTH),
        ("taskReminders", create_task_reminder, ("t", "m"), NotificationType.TASK),
        ("sensorAlerts", create_sensor_alert, ("animal_3", "t", "m"), NotificationType.SENSOR),
        ("inventoryAlerts", create_inventory_alert, ("t", "m"), NotificationType.ALERT),
    ],
)
async def test_helpers_respect_category_setting(
    store: NotificationStore, setting: str, factory, args: tuple, expected_type: NotificationType
) -> None:
    created = await factory(store, *args)
    assert created is not None
    assert created.type == expected_type

    store.update_settings({setting: False})

    assert await factory(store, *args) is None
    assert len(store.notifications) == 1


async def test_low_risk_prediction_creates_nothing(store: NotificationStore) -> None:
    assert await alert_from_prediction(store, prediction(RiskLevel.LOW, issues=[])) is None
    assert store.notifications == ()


@pytest.mark.parametrize(
    "risk_level,priority",
    [
        (RiskLevel.MEDIUM, NotificationPriority.MEDIUM),
        (RiskLevel.HIGH, NotificationPriority.HIGH),
        (RiskLevel.CRITICAL, NotificationPriority.URGENT),
    ],
)
async def test_elevated_prediction_becomes_health_alert(
    store: NotificationStore, risk_level: RiskLevel, priority: NotificationPriority
) -> None:
    notification = await alert_from_prediction(store, prediction(risk_level), animal_name="Daisy")

    assert notification is not None
    assert notification.type == NotificationType.HEALTH
    assert notification.priority == priority
    assert notification.animal_id == "animal_2"
    assert "Daisy" in notification.title
    assert "significant weight loss" in notification.message
    assert notification.metadata == {"riskLevel": risk_level.value, "confidence": 0.75}


async def test_prediction_alert_suppressed_when_health_alerts_off(
    store: NotificationStore,
) -> None:
    store.update_settings({"healthAlerts": False})

    assert await alert_from_prediction(store, prediction(RiskLevel.CRITICAL)) is None


def test_prediction_message_includes_timeframe() -> None:
    message = format_prediction_message(prediction(RiskLevel.MEDIUM))

    assert message == (
        "Detected: significant weight loss. "
        "Recommended: review feeding/nutrition. "
        "Timeframe: within 1 week."
    )
