"""Bounded retries for content store reads.

Reads are idempotent, so a dropped or refused connection is retried with
capped exponential backoff. Whatever still fails surfaces as
`ContentStoreUnavailableError` so callers only handle the content store
error family.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError

from folio.config import Settings, settings
from folio.core.exceptions import ContentStoreUnavailableError

logger = logging.getLogger(__name__)

_ResultT = TypeVar("_ResultT")

_DROPPED_CONNECTION_MARKERS = (
    "connection is closed",
    "underlying connection is closed",
    "server closed the connection unexpectedly",
    "connection was closed",
    "connection refused",
)


@dataclass(frozen=True, slots=True)
class ReadRetryPolicy:
    attempts: int = 3
    base_delay_seconds: float = 0.2
    max_delay_seconds: float = 2.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")

    @classmethod
    def from_settings(cls, app_settings: Settings | None = None) -> ReadRetryPolicy:
        app_settings = app_settings or settings
        return cls(
            attempts=app_settings.database_retry_attempts,
            base_delay_seconds=app_settings.database_retry_base_delay_seconds,
            max_delay_seconds=app_settings.database_retry_max_delay_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt (1-based)."""
        return min(self.max_delay_seconds, self.base_delay_seconds * (2 ** (attempt - 1)))


def is_transient_connection_error(exc: BaseException) -> bool:
    """True when the failure looks like a dropped, refused or timed-out connection."""
    if isinstance(exc, (InterfaceError, OperationalError, ConnectionError, TimeoutError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True

    lowered = str(exc).lower()
    return any(marker in lowered for marker in _DROPPED_CONNECTION_MARKERS)


async def read_with_retry(
    read: Callable[[], Awaitable[_ResultT]],
    *,
    operation: str,
    policy: ReadRetryPolicy | None = None,
    log_context: Mapping[str, Any] | None = None,
) -> _ResultT:
    """Run a store read, retrying transient connection failures.

    Driver and socket errors that survive the policy are raised as
    `ContentStoreUnavailableError`; anything else propagates unchanged.
    """
    policy = policy or ReadRetryPolicy.from_settings()
    context = {**(log_context or {}), "operation": operation}

    attempt = 1
    while True:
        try:
            return await read()
        except (SQLAlchemyError, OSError) as exc:
            if attempt < policy.attempts and is_transient_connection_error(exc):
                delay = policy.delay_for(attempt)
                logger.warning(
                    "Content store connection dropped; retrying read",
                    extra={
                        **context,
                        "attempt": attempt,
                        "max_attempts": policy.attempts,
                        "retry_in_seconds": delay,
                        "error": str(exc),
                    },
                )
                await asyncio.sleep(delay)
                attempt += 1
                continue

            logger.error(
                "Content store read failed",
                extra={**context, "attempt": attempt, "error": str(exc)},
            )
            raise ContentStoreUnavailableError(operation, str(exc)) from exc
