"""
Convenience constructors for dashboard notifications.

Each helper checks its category preference before creating anything, so a
disabled category produces no entry at all (not just no email).
"""

import structlog

from herd_health.domain.models import (
    HealthPrediction,
    Notification,
    NotificationDraft,
    NotificationPriority,
    NotificationType,
    RiskLevel,
)
from herd_health.services.notification_store import NotificationStore

logger = structlog.get_logger(__name__)

PRIORITY_BY_RISK: dict[RiskLevel, NotificationPriority] = {
    RiskLevel.MEDIUM: NotificationPriority.MEDIUM,
    RiskLevel.HIGH: NotificationPriority.HIGH,
    RiskLevel.CRITICAL: NotificationPriority.URGENT,
}


async def create_health_alert(
    store: NotificationStore,
    animal_id: str,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.HIGH,
    metadata: dict | None = None,
) -> Notification | None:
    if not store.settings.health_alerts:
        return None
    return await store.add(
        NotificationDraft(
            type=NotificationType.HEALTH,
            title=title,
            message=message,
            priority=priority,
            action_required=True,
            animal_id=animal_id,
            metadata=metadata or {},
        )
    )


async def create_task_reminder(
    store: NotificationStore,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
) -> Notification | None:
    if not store.settings.task_reminders:
        return None
    return await store.add(
        NotificationDraft(
            type=NotificationType.TASK,
            title=title,
            message=message,
            priority=priority,
            action_required=True,
        )
    )


async def create_sensor_alert(
    store: NotificationStore,
    animal_id: str,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
) -> Notification | None:
    if not store.settings.sensor_alerts:
        return None
    return await store.add(
        NotificationDraft(
            type=NotificationType.SENSOR,
            title=title,
            message=message,
            priority=priority,
            action_required=True,
            animal_id=animal_id,
        )
    )


async def create_inventory_alert(
    store: NotificationStore,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
) -> Notification | None:
    if not store.settings.inventory_alerts:
        return None
    return await store.add(
        NotificationDraft(
            type=NotificationType.ALERT,
            title=title,
            message=message,
            priority=priority,
            action_required=True,
        )
    )


def format_prediction_message(prediction: HealthPrediction) -> str:
    parts = []
    if prediction.predicted_issues:
        parts.append("Detected: " + "; ".join(prediction.predicted_issues) + ".")
    if prediction.recommendations:
        parts.append("Recommended: " + "; ".join(prediction.recommendations) + ".")
    parts.append(f"Timeframe: {prediction.timeframe}.")
    return " ".join(parts)


async def alert_from_prediction(
    store: NotificationStore,
    prediction: HealthPrediction,
    animal_name: str | None = None,
) -> Notification | None:
    """
    Turn an elevated prediction into a health alert.

    Low-risk predictions produce nothing. Priority follows the risk level:
    medium -> medium, high -> high, critical -> urgent.
    """
    priority = PRIORITY_BY_RISK.get(prediction.risk_level)
    if priority is None:
        return None

    label = animal_name or prediction.animal_id
    notification = await create_health_alert(
        store,
        animal_id=prediction.animal_id,
        title=f"Health Alert: {label} ({prediction.risk_level.value} risk)",
        message=format_prediction_message(prediction),
        priority=priority,
        metadata={
            "riskLevel": prediction.risk_level.value,
            "confidence": prediction.confidence,
        },
    )
    if notification is None:
        logger.debug(
            "health_alert_suppressed", animal_id=prediction.animal_id, reason="health_alerts_off"
        )
    return notification
