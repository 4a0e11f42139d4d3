"""Fixed-interval polling with a retry ceiling and an optional cancel signal."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..constants import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_MAX_ATTEMPTS
from .exceptions import ConvergenceTimeoutError, MigrationCancelledError

logger = structlog.get_logger("es_migrate")

T = TypeVar("T")


class PollPolicy(BaseModel):
    """How often and how many times to check for convergence."""

    model_config = ConfigDict(frozen=True)

    interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, ge=0)
    max_attempts: int = Field(default=DEFAULT_POLL_MAX_ATTEMPTS, ge=1)


async def poll_until(
    check: Callable[[], Awaitable[T]],
    *,
    policy: PollPolicy | None = None,
    cancel_event: asyncio.Event | None = None,
    description: str = "condition",
    timeout_message: str | None = None,
) -> T:
    """Call ``check`` until it returns a truthy value.

    There is no backoff: attempts are ``policy.interval_seconds`` apart and
    there is no wait after the last one. Exceptions raised by ``check`` are
    not retried.

    Args:
        check: Async callable returning a truthy value once the condition holds
        policy: Poll interval and attempt budget (defaults to 30 x 5s)
        cancel_event: Setting this event aborts the wait between attempts
        description: Used in log events and the default timeout message
        timeout_message: Message for the timeout error, overriding the default

    Returns:
        The first truthy value returned by ``check``

    Raises:
        ConvergenceTimeoutError: Every attempt returned a falsy value
        MigrationCancelledError: ``cancel_event`` was set
    """
    policy = policy or PollPolicy()

    for attempt in range(1, policy.max_attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise MigrationCancelledError(f"cancelled while waiting for {description}")

        result = await check()
        if result:
            return result

        if attempt == policy.max_attempts:
            break

        logger.debug(
            "Condition not met yet",
            description=description,
            attempt=attempt,
            max_attempts=policy.max_attempts,
        )
        await _wait(policy.interval_seconds, cancel_event, description)

    raise ConvergenceTimeoutError(
        timeout_message
        or f"{description}: not satisfied after {policy.max_attempts} attempts"
    )


async def _wait(seconds: float, cancel_event: asyncio.Event | None, description: str) -> None:
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except TimeoutError:
        return
    raise MigrationCancelledError(f"cancelled while waiting for {description}")
