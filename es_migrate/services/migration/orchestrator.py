"""Run the migration steps in order, stopping at the first failure."""

from collections.abc import Sequence

from ...core.exceptions import MigrationError, RecreationError
from ...models import MigrationState
from .base import MigrationContext, MigrationStep
from .cleanup import Cleanup
from .collector import ResourceCollector
from .convergence import ConvergenceWaiter, IdentityVerifier
from .deleter import Deleter
from .guard import ReclaimPolicyGuard
from .recreator import Recreator


def default_steps() -> list[MigrationStep]:
    """The migration pipeline, in execution order."""
    return [
        ResourceCollector(),
        ReclaimPolicyGuard(),
        Deleter(),
        Recreator(),
        ConvergenceWaiter(),
        IdentityVerifier(),
        Cleanup(),
    ]


class MigrationOrchestrator:
    """Moves one Elasticsearch cluster from the source to the target Kubernetes cluster.

    Each step receives the state returned by the previous one. There is no
    rollback: a failing step leaves both clusters as they are at that point.
    """

    def __init__(self, steps: Sequence[MigrationStep] | None = None):
        self.steps = list(steps) if steps is not None else default_steps()

    async def migrate(self, context: MigrationContext) -> MigrationState:
        """Run every step against ``context``.

        Raises:
            MigrationError: The first step failure, unchanged
        """
        state = MigrationState()
        for step in self.steps:
            context.logger.debug("Starting migration step", step=step.name)
            try:
                state = await step.run(context, state)
            except MigrationError as e:
                self._log_failure(context, step, e)
                raise
            context.logger.debug("Completed migration step", step=step.name)

        context.logger.info("Migration successful!", cluster_uuid=state.cluster_uuid)
        return state

    def _log_failure(self, context: MigrationContext, step: MigrationStep, error: MigrationError) -> None:
        fields = {"step": step.name, "error": str(error), "error_type": type(error).__name__}
        if isinstance(error, RecreationError) and error.created_volumes:
            fields["target_pvs_to_clean_up"] = error.created_volumes
        context.logger.error("Migration step failed", **fields)
