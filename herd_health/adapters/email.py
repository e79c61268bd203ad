"""Email delivery channel used when no real transport is wired in."""

import uuid

import structlog

from herd_health.domain.models import Notification
from herd_health.services.dispatch import Result

logger = structlog.get_logger(__name__)


class LoggingEmailSender:
    """
    Email channel that records each delivery in the log instead of mailing it.

    Implements the ``NotificationSender`` protocol. Swap in a real transport
    (SMTP, SendGrid, ...) with the same ``send`` signature for production.
    """

    channel = "email"

    def __init__(self, recipient: str = "farm-manager@localhost") -> None:
        self.recipient = recipient
        self.logger = logger.bind(component="logging_email_sender", recipient=recipient)

    async def send(self, notification: Notification) -> Result[str, Exception]:
        message_id = f"email_{uuid.uuid4().hex[:12]}"
        self.logger.info(
            "email_notification_sent",
            message_id=message_id,
            notification_id=notification.id,
            subject=notification.title,
            priority=notification.priority.value,
        )
        return Result.ok(message_id)
