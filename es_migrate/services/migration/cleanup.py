"""Remove the stale PV objects left in the source cluster."""

from ...core.exceptions import KubernetesAPIError, MutationError, ResourceNotFoundError
from ...models import KubeObject, MigrationState
from .base import MigrationContext, MigrationStep


class Cleanup(MigrationStep):
    """Delete the source PVs once the target cluster has taken over the data.

    Only the Kubernetes objects are removed: the PVs retain, and the backing
    volumes now belong to the PVs created in the target cluster.
    """

    name = "cleanup_source"

    async def run(self, context: MigrationContext, state: MigrationState) -> MigrationState:
        snapshot = state.require_snapshot()
        context.logger.info("Removing stale PVs from source cluster", pvs=snapshot.volume_names)
        await self.delete_volumes(context, snapshot.volumes)
        return state.completed(self.name)

    async def delete_volumes(self, context: MigrationContext, volumes: tuple[KubeObject, ...]) -> None:
        for volume in volumes:
            pv_name = volume["metadata"]["name"]
            context.logger.info("Deleting PV in source cluster", pv=pv_name)
            try:
                await context.source.delete_pv(pv_name)
            except ResourceNotFoundError:
                continue
            except KubernetesAPIError as e:
                raise MutationError(f"failed to delete PV {pv_name} in source cluster: {e}") from e
