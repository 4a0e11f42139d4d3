"""Shared context and step contract for the migration pipeline."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from ...core.polling import PollPolicy
from ...models import MigrationState

if TYPE_CHECKING:
    from ...core.kube_client import ClusterEndpoint


class MigrationContext:
    """Per-migration collaborators: the two endpoints, the poll policy and a clock.

    The clock starts when the context is created; ``logger`` binds the
    elapsed time so each log event shows how far into the migration it is.
    """

    def __init__(
        self,
        source: "ClusterEndpoint",
        target: "ClusterEndpoint",
        namespace: str,
        name: str,
        poll_policy: PollPolicy | None = None,
        cancel_event: asyncio.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.target = target
        self.namespace = namespace
        self.name = name
        self.poll_policy = poll_policy or PollPolicy()
        self.cancel_event = cancel_event or asyncio.Event()
        self._clock = clock
        self._started_at = clock()
        self._logger = structlog.get_logger("es_migrate").bind(
            namespace=namespace, elasticsearch=name
        )

    def elapsed_seconds(self) -> int:
        return round(self._clock() - self._started_at)

    @property
    def logger(self) -> Any:
        return self._logger.bind(elapsed=f"{self.elapsed_seconds()}s")

    def cancel(self) -> None:
        """Abort any poll in progress at its next wait."""
        self.cancel_event.set()


class MigrationStep(ABC):
    """One step of the migration pipeline."""

    name: str = ""

    @abstractmethod
    async def run(self, context: MigrationContext, state: MigrationState) -> MigrationState:
        """Run the step and return the state handed to the next step.

        Raises:
            MigrationError: The step failed; the pipeline stops here
        """
