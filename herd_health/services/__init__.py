"""
Core services for the application.

This package contains trend aggregation, risk classification, nutrition
planning and the notification store with its dispatch machinery.
"""

from .dispatch import NotificationSender, Result
from .herd_health_service import HerdHealthService
from .notification_store import NotificationStore, NotificationStoreConfig
from .nutrition_advisor import generate_nutrition_plan
from .risk_classifier import classify_risk, predict_health_risks
from .trend_aggregator import EmptyObservationWindowError, aggregate_trends

__all__ = [
    "EmptyObservationWindowError",
    "HerdHealthService",
    "NotificationSender",
    "NotificationStore",
    "NotificationStoreConfig",
    "Result",
    "aggregate_trends",
    "classify_risk",
    "generate_nutrition_plan",
    "predict_health_risks",
]
