"""
Rule-based health risk classification.

Rules are evaluated in a fixed order and are cumulative: each rule may append
an issue and a recommendation and may raise the risk level, but never lowers
it. Confidence is fixed by the first severity rule that fires (health score or
decline); the weight and temperature rules only add findings and escalate.
"""

from collections.abc import Sequence

import structlog

from herd_health.domain.models import HealthObservation, HealthPrediction, RiskLevel, TrendFeatures
from herd_health.services.trend_aggregator import DEFAULT_WINDOW_SIZE, aggregate_trends

logger = structlog.get_logger(__name__)

CRITICAL_SCORE_THRESHOLD = 70.0
HIGH_SCORE_THRESHOLD = 80.0
DECLINE_THRESHOLD = 0.10
WEIGHT_LOSS_THRESHOLD = -0.05
WEIGHT_GAIN_THRESHOLD = 0.10
FEVER_THRESHOLD_CELSIUS = 39.5

BASELINE_CONFIDENCE = 0.70

TIMEFRAMES: dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: "immediate action required",
    RiskLevel.HIGH: "within 24–48 hours",
    RiskLevel.MEDIUM: "within 1 week",
    RiskLevel.LOW: "monitor over next month",
}


def timeframe_for(risk_level: RiskLevel) -> str:
    """Response timeframe for a risk level."""
    return TIMEFRAMES[risk_level]


class _Assessment:
    """Running state of one classification pass."""

    def __init__(self) -> None:
        self.risk_level = RiskLevel.LOW
        self.confidence = BASELINE_CONFIDENCE
        self.issues: list[str] = []
        self.recommendations: list[str] = []

    def flag(self, issue: str, recommendation: str, escalate_to: RiskLevel | None = None) -> None:
        self.issues.append(issue)
        self.recommendations.append(recommendation)
        if escalate_to is not None:
            self.risk_level = self.risk_level.escalate(escalate_to)


def classify_risk(features: TrendFeatures) -> HealthPrediction:
    """Map trend features to a health prediction."""
    assessment = _Assessment()

    # Severity rules: the first match sets the base level and the confidence
    if features.avg_health_score < CRITICAL_SCORE_THRESHOLD:
        assessment.flag(
            "severe health decline",
            "immediate veterinary consultation",
            RiskLevel.CRITICAL,
        )
        assessment.confidence = 0.90
    elif features.avg_health_score < HIGH_SCORE_THRESHOLD:
        assessment.flag(
            "health deterioration trend",
            "schedule check within 48 hours",
            RiskLevel.HIGH,
        )
        assessment.confidence = 0.85
    elif features.health_decline > DECLINE_THRESHOLD:
        assessment.flag(
            "declining health trend",
            "monitor closely / preventive care",
            RiskLevel.MEDIUM,
        )
        assessment.confidence = 0.75

    if features.weight_trend < WEIGHT_LOSS_THRESHOLD:
        assessment.flag(
            "significant weight loss",
            "review feeding/nutrition",
            RiskLevel.MEDIUM,
        )
    elif features.weight_trend > WEIGHT_GAIN_THRESHOLD:
        assessment.flag(
            "rapid weight gain",
            "adjust portions and exercise",
        )

    if features.avg_temperature is not None and features.avg_temperature > FEVER_THRESHOLD_CELSIUS:
        assessment.flag(
            "elevated temperature pattern",
            "monitor for infection/stress",
            RiskLevel.MEDIUM,
        )

    prediction = HealthPrediction(
        animal_id=features.animal_id,
        risk_level=assessment.risk_level,
        confidence=assessment.confidence,
        predicted_issues=assessment.issues,
        recommendations=assessment.recommendations,
        timeframe=timeframe_for(assessment.risk_level),
    )

    logger.info(
        "health_prediction_computed",
        animal_id=prediction.animal_id,
        risk_level=prediction.risk_level.value,
        confidence=prediction.confidence,
        issues=len(prediction.predicted_issues),
    )
    return prediction


def predict_health_risks(
    observations: Sequence[HealthObservation], window_size: int = DEFAULT_WINDOW_SIZE
) -> HealthPrediction:
    """
    Aggregate and classify one animal's time-ordered observations.

    Raises:
        EmptyObservationWindowError: if ``observations`` is empty.
        ValueError: if ``observations`` belong to more than one animal.
    """
    return classify_risk(aggregate_trends(observations, window_size))
