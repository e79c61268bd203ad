"""
Domain models for animal health scoring and farm notifications.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation and serialize with camelCase aliases so the
dashboard can consume them unchanged.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    """Normalize to UTC; timestamps without a timezone are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class RiskLevel(str, Enum):
    """Ordinal health-risk classification, least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(RiskLevel).index(self)

    def escalate(self, other: "RiskLevel") -> "RiskLevel":
        """Return the more severe of the two levels."""
        return other if other.rank > self.rank else self


class NotificationType(str, Enum):
    """Notification categories shown on the dashboard."""

    HEALTH = "health"
    TASK = "task"
    ALERT = "alert"
    SYSTEM = "system"
    BREEDING = "breeding"
    PRODUCTION = "production"
    SENSOR = "sensor"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class DomainModel(BaseModel):
    """Base for wire-facing models: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthObservation(DomainModel):
    """A single recorded health check for one animal."""

    model_config = ConfigDict(frozen=True)  # Recorded observations never change

    animal_id: str = Field(min_length=1)
    timestamp: UtcDatetime = Field(default_factory=lambda: datetime.now(UTC))
    health_score: float = Field(ge=0.0, le=100.0)
    weight: float = Field(gt=0.0, description="Body weight in kg")
    temperature: float | None = Field(default=None, description="Body temperature in °C")
    activity: float | None = None


class TrendFeatures(DomainModel):
    """Summary features over the recent observation window of one animal."""

    model_config = ConfigDict(frozen=True)

    animal_id: str
    observation_count: int = Field(gt=0)
    avg_health_score: float
    health_decline: float
    weight_trend: float
    # None means no temperature readings in the window, which is "no signal"
    avg_temperature: float | None = None


class HealthPrediction(DomainModel):
    """Risk classification derived from an animal's trend features."""

    model_config = ConfigDict(frozen=True)

    animal_id: str
    risk_level: RiskLevel
    confidence: float = Field(ge=0.0, le=1.0)
    predicted_issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    timeframe: str


class NutritionPlan(DomainModel):
    """Daily feeding targets for one animal."""

    model_config = ConfigDict(frozen=True)

    daily_calories: int = Field(gt=0)
    protein_requirement: float = Field(ge=0.0, description="Daily protein in kg")
    feed_type: str
    supplements: list[str] = Field(default_factory=list)
    feeding_schedule: list[str]


class NotificationDraft(DomainModel):
    """Caller-supplied notification content; the store assigns id and timestamp."""

    type: NotificationType
    title: str = Field(min_length=1)
    message: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    animal_id: str | None = None
    user_id: str | None = None
    action_required: bool | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    expires_at: UtcDatetime | None = None


class Notification(NotificationDraft):
    """A recorded notification. Only ``read`` and ``email_sent`` ever change."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: UtcDatetime
    read: bool = False
    email_sent: bool = False


class NotificationSettings(DomainModel):
    """Per-category delivery preferences."""

    email_notifications: bool = True
    # Reserved for a browser push channel; not consulted by dispatch
    push_notifications: bool = True
    health_alerts: bool = True
    task_reminders: bool = True
    breeding_updates: bool = True
    inventory_alerts: bool = True
    system_updates: bool = False
    sensor_alerts: bool = True


class NotificationSnapshot(DomainModel):
    """Persisted state of a notification store."""

    notifications: list[Notification] = Field(default_factory=list)
    settings: NotificationSettings = Field(default_factory=NotificationSettings)
