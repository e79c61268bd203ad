"""
End-to-end demonstration of the herd health pipeline.

This script exercises:
1. Configuration loading and validation
2. Observation intake and risk scoring for a small herd
3. Alert generation with email dispatch
4. Nutrition planning, including the unknown-species fallback

Run with: uv run python run_demo.py
"""

import asyncio
from datetime import UTC, datetime, timedelta

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from herd_health.adapters.email import LoggingEmailSender
from herd_health.config import get_config, print_config_summary, validate_config
from herd_health.domain.models import HealthObservation, RiskLevel
from herd_health.log import configure_logging
from herd_health.services.herd_health_service import HerdHealthService

console = Console()

RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}

# (animal_id, name, [(health_score, weight, temperature), ...]) oldest first
HERD = [
    ("animal_1", "Bella", [(92, 540, 38.6), (88, 538, 38.9), (72, 530, 39.8), (61, 521, 40.1)]),
    ("animal_2", "Daisy", [(85, 600, None), (85, 585, None), (85, 570, None), (85, 540, None)]),
    ("animal_3", "Luna", [(94, 61, 38.7), (95, 62, 38.8), (96, 62, 38.6)]),
    ("animal_4", "Max", [(83, 410, 39.7), (82, 412, 39.9), (81, 415, 39.6)]),
]


def build_observations(
    animal_id: str, readings: list[tuple[float, float, float | None]]
) -> list[HealthObservation]:
    start = datetime.now(UTC) - timedelta(days=len(readings))
    return [
        HealthObservation(
            animal_id=animal_id,
            timestamp=start + timedelta(days=i),
            health_score=score,
            weight=weight,
            temperature=temperature,
        )
        for i, (score, weight, temperature) in enumerate(readings)
    ]


async def demo_risk_scoring(service: HerdHealthService) -> None:
    console.print(Panel("🐄 Scoring Herd Health", style="blue"))

    table = Table(title="Health Predictions")
    table.add_column("Animal", style="cyan")
    table.add_column("Risk")
    table.add_column("Confidence", style="magenta")
    table.add_column("Issues", style="white")
    table.add_column("Timeframe", style="yellow")

    for animal_id, name, readings in HERD:
        prediction = None
        for observation in build_observations(animal_id, readings):
            prediction, _ = await service.record_and_alert(observation, animal_name=name)
        assert prediction is not None

        table.add_row(
            name,
            f"[{RISK_STYLES[prediction.risk_level]}]{prediction.risk_level.value.upper()}[/]",
            f"{prediction.confidence:.0%}",
            "\n".join(prediction.predicted_issues) or "-",
            prediction.timeframe,
        )

    console.print(table)


async def demo_notifications(service: HerdHealthService) -> None:
    console.print(Panel("📬 Notifications", style="blue"))
    store = service.notification_store
    await store.wait_for_dispatches()

    table = Table(title=f"Notifications ({store.unread_count} unread)")
    table.add_column("Priority", style="magenta")
    table.add_column("Title", style="cyan")
    table.add_column("Email", style="green")

    for notification in store.newest_first():
        table.add_row(
            notification.priority.value.upper(),
            notification.title,
            "sent" if notification.email_sent else "-",
        )
    console.print(table)


def demo_nutrition(service: HerdHealthService) -> None:
    console.print(Panel("🌾 Nutrition Plans", style="blue"))

    table = Table(title="Daily Targets")
    table.add_column("Species", style="cyan")
    table.add_column("Weight (kg)")
    table.add_column("Age (y)")
    table.add_column("Calories", style="green")
    table.add_column("Protein (kg)", style="green")
    table.add_column("Feed", style="yellow")

    for species, weight, age in [("cow", 550, 4), ("sheep", 45, 0.8), ("llama", 100, 3)]:
        plan = service.nutrition_plan(species, weight, age)
        table.add_row(
            species,
            str(weight),
            str(age),
            str(plan.daily_calories),
            f"{plan.protein_requirement:.2f}",
            plan.feed_type,
        )
    console.print(table)


async def main() -> None:
    console.print(Panel("🧪 Herd Health Monitor - Demo", style="bold blue"))

    validate_config()
    print_config_summary()
    config = get_config()
    configure_logging(config.logging)

    service = HerdHealthService.from_config(config, sender=LoggingEmailSender())

    async with service.notification_store.session():
        await demo_risk_scoring(service)
        await demo_notifications(service)
    demo_nutrition(service)

    console.print("✅ Demo finished", style="green")


if __name__ == "__main__":
    asyncio.run(main())
