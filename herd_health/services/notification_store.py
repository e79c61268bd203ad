"""
Notification store with preference-gated, at-most-once email dispatch.

Design principles:
- Single writer: one event loop owns the store; every mutation is a plain
  synchronous step on that loop, so readers always see a consistent snapshot
- Fire-and-forget dispatch: ``add`` returns once the entry is recorded, the
  email goes out on a background task that may only flip ``email_sent``
- At most once: the dispatch decision for an entry is made exactly once, at
  ``add`` time, and is never retried or re-triggered
- Durability delegated to a ``KeyValueStore`` collaborator
"""

import asyncio
import time
import uuid
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import BaseModel, Field, ValidationError
from pydantic.alias_generators import to_snake

from herd_health.adapters.storage import InMemoryKeyValueStore, KeyValueStore
from herd_health.domain.models import (
    Notification,
    NotificationDraft,
    NotificationSettings,
    NotificationSnapshot,
    NotificationType,
    as_utc,
)
from herd_health.services.dispatch import NotificationSender, send_with_timeout

logger = structlog.get_logger(__name__)

# Exhaustive: categories missing here never dispatch
DISPATCH_SETTING_BY_TYPE: dict[NotificationType, str] = {
    NotificationType.HEALTH: "health_alerts",
    NotificationType.TASK: "task_reminders",
    NotificationType.BREEDING: "breeding_updates",
    NotificationType.ALERT: "inventory_alerts",
    NotificationType.SYSTEM: "system_updates",
}

_TRUTHY = {"1", "true", "yes", "on"}


class NotificationStoreConfig(BaseModel):
    """Configuration with validation and smart defaults."""

    dispatch_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Upper bound on one email dispatch; exceeding it counts as failure.",
    )
    storage_key: str = Field(
        default="notification-storage",
        min_length=1,
        description="Key the store snapshot is persisted under.",
    )


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def new_notification_id() -> str:
    return f"notif_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class NotificationStore:
    """
    Insertion-ordered notification log plus delivery settings.

    Public surface for dashboard collaborators: ``add``, ``mark_read``,
    ``mark_all_read``, ``delete``, ``update_settings``, ``clear_expired`` and
    the ``notifications`` / ``settings`` accessors.
    """

    def __init__(
        self,
        sender: NotificationSender | None = None,
        config: NotificationStoreConfig | None = None,
        storage: KeyValueStore | None = None,
    ) -> None:
        self.config = config or NotificationStoreConfig()
        self.sender = sender
        self.storage = storage if storage is not None else InMemoryKeyValueStore()
        self.logger = logger.bind(component="notification_store")

        self._notifications: dict[str, Notification] = {}
        self._settings = NotificationSettings()
        # Ids whose dispatch decision has been made; never dispatched again
        self._dispatch_claimed: set[str] = set()
        self._dispatch_tasks: set[asyncio.Task[bool]] = set()

        self._restore()

    # Read accessors

    @property
    def notifications(self) -> tuple[Notification, ...]:
        """All notifications in insertion order."""
        return tuple(self._notifications.values())

    def newest_first(self) -> list[Notification]:
        return list(reversed(self._notifications.values()))

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications.values() if not n.read)

    @property
    def settings(self) -> NotificationSettings:
        return self._settings.model_copy()

    def get(self, notification_id: str) -> Notification | None:
        return self._notifications.get(notification_id)

    # Mutations

    async def add(self, draft: NotificationDraft) -> Notification:
        """
        Record a notification and, when settings allow, start its email dispatch.

        Id assignment, insertion and the settings check happen in one
        uninterrupted step. Dispatch runs on a background task; its outcome
        never propagates here.
        """
        notification = Notification(
            **draft.model_dump(),
            id=new_notification_id(),
            created_at=datetime.now(UTC),
            read=False,
            email_sent=False,
        )
        self._notifications[notification.id] = notification
        should_dispatch = self._dispatch_allowed(notification)
        self._dispatch_claimed.add(notification.id)
        self._persist()

        self.logger.info(
            "notification_added",
            notification_id=notification.id,
            type=notification.type.value,
            priority=notification.priority.value,
            dispatch=should_dispatch,
        )

        if should_dispatch:
            task = asyncio.get_running_loop().create_task(
                self._deliver(notification), name=f"dispatch-{notification.id}"
            )
            self._dispatch_tasks.add(task)
            task.add_done_callback(self._on_dispatch_done)

        return notification

    def mark_read(self, notification_id: str) -> None:
        """Mark one notification read. Unknown ids and repeat calls are no-ops."""
        current = self._notifications.get(notification_id)
        if current is None or current.read:
            return
        self._notifications[notification_id] = current.model_copy(update={"read": True})
        self._persist()

    def mark_all_read(self) -> None:
        changed = False
        for notification_id, current in self._notifications.items():
            if not current.read:
                self._notifications[notification_id] = current.model_copy(update={"read": True})
                changed = True
        if changed:
            self._persist()

    def delete(self, notification_id: str) -> None:
        """Remove a notification. Unknown ids are a no-op."""
        if self._notifications.pop(notification_id, None) is not None:
            self._persist()
            self.logger.info("notification_deleted", notification_id=notification_id)

    def clear_expired(self, now: datetime | None = None) -> int:
        """Drop notifications whose expiry has passed. Returns how many were removed."""
        now = as_utc(now) if now is not None else datetime.now(UTC)
        expired = [
            n.id
            for n in self._notifications.values()
            if n.expires_at is not None and n.expires_at <= now
        ]
        for notification_id in expired:
            del self._notifications[notification_id]
        if expired:
            self._persist()
            self.logger.info("expired_notifications_cleared", count=len(expired))
        return len(expired)

    def update_settings(
        self, changes: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> NotificationSettings:
        """
        Merge a partial settings update.

        Keys may be snake_case or camelCase. Values are coerced to bool and
        unknown keys are ignored so older clients keep working.
        """
        merged = {**(changes or {}), **kwargs}
        known = NotificationSettings.model_fields
        updates: dict[str, bool] = {}
        for key, value in merged.items():
            field_name = to_snake(key)
            if field_name not in known:
                self.logger.debug("unknown_setting_ignored", key=key)
                continue
            updates[field_name] = _coerce_bool(value)

        if updates:
            self._settings = self._settings.model_copy(update=updates)
            self._persist()
            self.logger.info("notification_settings_updated", **updates)
        return self.settings

    # Dispatch

    async def dispatch_email(self, notification: Notification) -> bool:
        """
        Send ``notification`` by email unless its dispatch was already decided.

        Entries recorded through ``add`` are always already decided, so this
        never re-sends or retries them. Returns True when the email went out.
        """
        if notification.id in self._dispatch_claimed:
            self.logger.info("dispatch_not_retriggered", notification_id=notification.id)
            return False
        self._dispatch_claimed.add(notification.id)
        return await self._deliver(notification)

    async def wait_for_dispatches(self) -> None:
        """Wait until every in-flight dispatch has finished."""
        while self._dispatch_tasks:
            await asyncio.gather(*list(self._dispatch_tasks))

    @asynccontextmanager
    async def session(self) -> AsyncIterator["NotificationStore"]:
        """Use the store and drain outstanding dispatches on exit."""
        try:
            yield self
        finally:
            await self.wait_for_dispatches()

    def _dispatch_allowed(self, notification: Notification) -> bool:
        setting = DISPATCH_SETTING_BY_TYPE.get(notification.type)
        if setting is None or not self._settings.email_notifications:
            return False
        if not getattr(self._settings, setting):
            return False
        if self.sender is None:
            self.logger.debug("dispatch_skipped_no_sender", notification_id=notification.id)
            return False
        return True

    def _on_dispatch_done(self, task: asyncio.Task[bool]) -> None:
        self._dispatch_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error(
                "email_dispatch_crashed",
                task=task.get_name(),
                error=str(error),
                exc_info=error,
            )

    async def _deliver(self, notification: Notification) -> bool:
        if self.sender is None:
            return False

        result = await send_with_timeout(
            self.sender, notification, self.config.dispatch_timeout_seconds
        )
        if result.is_err():
            self.logger.warning(
                "email_dispatch_failed",
                notification_id=notification.id,
                error=str(result.unwrap_err()),
            )
            return False

        current = self._notifications.get(notification.id)
        if current is None:
            # Deleted while the email was in flight
            self.logger.info("email_sent_for_deleted_notification", notification_id=notification.id)
            return True
        self._notifications[notification.id] = current.model_copy(update={"email_sent": True})
        self._persist()
        self.logger.info(
            "email_dispatched", notification_id=notification.id, reference=result.unwrap()
        )
        return True

    # Persistence

    def _persist(self) -> None:
        snapshot = NotificationSnapshot(
            notifications=list(self._notifications.values()), settings=self._settings
        )
        try:
            self.storage.set(self.config.storage_key, snapshot.model_dump_json(by_alias=True))
        except OSError as e:
            self.logger.exception("notification_persist_failed", error=str(e))

    def _restore(self) -> None:
        raw = self.storage.get(self.config.storage_key)
        if raw is None:
            return
        try:
            snapshot = NotificationSnapshot.model_validate_json(raw)
        except ValidationError as e:
            self.logger.error("notification_snapshot_invalid", error=str(e))
            return

        self._notifications = {n.id: n for n in snapshot.notifications}
        self._settings = snapshot.settings
        self._dispatch_claimed.update(self._notifications)
        self.logger.info("notification_store_restored", count=len(self._notifications))
