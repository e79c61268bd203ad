"""
Outbound notification dispatch primitives.

Key patterns:
- Protocol-based dependency injection for the delivery channel
- Generic Result type so delivery failure is a value, not an exception
- Timeouts turned into failures at the boundary
"""

import asyncio
from typing import Generic, Protocol, TypeVar

import structlog

from herd_health.domain.models import Notification

logger = structlog.get_logger(__name__)

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit error handling without exceptions for expected failures.

    Delivery failures are expected business outcomes: they are returned, logged
    and recorded, never raised to the code that created the notification.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_or(self, default: ValueT) -> ValueT:
        return self._value if self._error is None else default  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.err({self._error!r})"
        return f"Result.ok({self._value!r})"


class DispatchTimeoutError(TimeoutError):
    """A sender did not finish within the configured bound."""


class NotificationSender(Protocol):
    """
    A single outbound delivery channel (email, SMS, ...).

    ``send`` returns ``Result.ok(reference)`` on delivery, where reference is a
    channel-specific message id, or ``Result.err(exc)`` on failure.
    """

    channel: str

    async def send(self, notification: Notification) -> Result[str, Exception]: ...


async def send_with_timeout(
    sender: NotificationSender, notification: Notification, timeout_seconds: float
) -> Result[str, Exception]:
    """
    Deliver one notification, converting timeouts and raised errors to failures.
    """
    log = logger.bind(channel=sender.channel, notification_id=notification.id)
    try:
        result = await asyncio.wait_for(sender.send(notification), timeout=timeout_seconds)
    except TimeoutError:
        log.warning("dispatch_timeout", timeout_seconds=timeout_seconds)
        return Result.err(
            DispatchTimeoutError(f"{sender.channel} dispatch exceeded {timeout_seconds}s")
        )
    except Exception as e:
        log.exception("dispatch_raised", error=str(e))
        return Result.err(e)

    if result.is_err():
        log.warning("dispatch_failed", error=str(result.unwrap_err()))
    return result
