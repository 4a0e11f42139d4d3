"""Recreate the PVs and the Elasticsearch resource in the target cluster.

The recreated PVs point at the same backing cloud volumes as the source PVs.
Their ``spec.claimRef`` keeps the claim's namespace and name, so each PV is
pre-bound to the PVC the ECK operator will create in the target cluster, but
drops the source claim's uid and resourceVersion so the new PVC can bind.
"""

import copy

from ...constants import SERVER_ASSIGNED_METADATA
from ...core.exceptions import KubernetesAPIError, RecreationError
from ...models import KubeObject, MigrationState, ResourceSnapshot
from .base import MigrationContext, MigrationStep


def _strip_metadata(metadata: dict, *extra: str) -> None:
    for key in (*SERVER_ASSIGNED_METADATA, *extra):
        metadata.pop(key, None)


def sanitize_volume(volume: KubeObject) -> KubeObject:
    """Return a copy of a source PV suitable for creation in the target cluster.

    Raises:
        RecreationError: The PV has no ``spec.claimRef``
    """
    metadata = volume.get("metadata") or {}
    claim_ref = (volume.get("spec") or {}).get("claimRef")
    if claim_ref is None:
        raise RecreationError(f"spec.claimRef is nil on PV {metadata.get('name')}")

    to_create = copy.deepcopy(volume)
    _strip_metadata(to_create["metadata"])
    to_create.pop("status", None)
    to_create["spec"]["claimRef"].pop("uid", None)
    to_create["spec"]["claimRef"].pop("resourceVersion", None)
    return to_create


def sanitize_elasticsearch(elasticsearch: KubeObject) -> KubeObject:
    """Return a copy of the source Elasticsearch resource for the target cluster.

    Annotations are dropped entirely: they carry the source cluster's
    bootstrap markers, which the operator must derive again in the target.
    """
    to_create = copy.deepcopy(elasticsearch)
    _strip_metadata(to_create.setdefault("metadata", {}), "ownerReferences", "annotations")
    to_create["status"] = {}
    return to_create


class Recreator(MigrationStep):
    """Create the sanitized PVs, then the sanitized Elasticsearch resource, in the target."""

    name = "recreate_target"

    async def run(self, context: MigrationContext, state: MigrationState) -> MigrationState:
        created = await self.recreate(context, state.require_snapshot())
        return state.completed(self.name, created_volumes=tuple(created))

    async def recreate(self, context: MigrationContext, snapshot: ResourceSnapshot) -> list[str]:
        """Create PVs first and the Elasticsearch resource last.

        Target PVs created before a failure are not removed; the raised
        ``RecreationError`` lists them so they can be cleaned up by hand.

        Returns:
            Names of the PVs created in the target cluster
        """
        created: list[str] = []
        for volume in snapshot.volumes:
            pv_name = volume["metadata"]["name"]
            try:
                to_create = sanitize_volume(volume)
            except RecreationError as e:
                raise RecreationError(str(e), created_volumes=created) from e

            context.logger.info(
                "Creating PV in target cluster (same backing CSP volume)", pv=pv_name
            )
            try:
                await context.target.create_pv(to_create)
            except KubernetesAPIError as e:
                raise RecreationError(
                    f"failed to create PV {pv_name} in target cluster: {e}",
                    created_volumes=created,
                ) from e
            created.append(pv_name)

        to_create = sanitize_elasticsearch(snapshot.elasticsearch)
        context.logger.info("Creating Elasticsearch in target cluster")
        try:
            await context.target.create_elasticsearch(to_create)
        except KubernetesAPIError as e:
            raise RecreationError(
                f"failed to create Elasticsearch {snapshot.ref} in target cluster: {e}",
                created_volumes=created,
            ) from e
        return created
