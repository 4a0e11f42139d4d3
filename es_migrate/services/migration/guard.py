"""Make sure source PVs outlive the deletion of their PVCs."""

import copy

from ...constants import RECLAIM_POLICY_RETAIN
from ...core.exceptions import KubernetesAPIError, MutationError
from ...models import KubeObject, MigrationState
from .base import MigrationContext, MigrationStep


def reclaim_policy(volume: KubeObject) -> str | None:
    return (volume.get("spec") or {}).get("persistentVolumeReclaimPolicy")


class ReclaimPolicyGuard(MigrationStep):
    """Set ``spec.persistentVolumeReclaimPolicy=Retain`` on every source PV.

    PVs that already retain are skipped, so running the guard twice issues no
    additional update. A failure leaves earlier PVs set to Retain; that is
    never reverted.
    """

    name = "protect_volumes"

    async def run(self, context: MigrationContext, state: MigrationState) -> MigrationState:
        await self.protect(context, state.require_snapshot().volumes)
        return state.completed(self.name)

    async def protect(self, context: MigrationContext, volumes: tuple[KubeObject, ...]) -> list[str]:
        """Update PVs that do not retain yet; returns the names that were updated."""
        updated = []
        for volume in volumes:
            if reclaim_policy(volume) == RECLAIM_POLICY_RETAIN:
                # nothing to do for that one
                continue
            pv_name = volume["metadata"]["name"]
            context.logger.info(
                "Setting spec.persistentVolumeReclaimPolicy=Retain on PV in source K8s cluster",
                pv=pv_name,
                previous_policy=reclaim_policy(volume),
            )
            body = copy.deepcopy(volume)
            body.setdefault("spec", {})["persistentVolumeReclaimPolicy"] = RECLAIM_POLICY_RETAIN
            try:
                await context.source.replace_pv(body)
            except KubernetesAPIError as e:
                raise MutationError(f"failed to set Retain reclaim policy on PV {pv_name}: {e}") from e
            updated.append(pv_name)
        return updated
