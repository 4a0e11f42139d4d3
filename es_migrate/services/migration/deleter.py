"""Delete the Elasticsearch resource and its Pods from the source cluster."""

from ...core.exceptions import KubernetesAPIError, MutationError, ResourceNotFoundError
from ...core.kube_client import cluster_selector
from ...models import MigrationState
from .base import MigrationContext, MigrationStep


class Deleter(MigrationStep):
    """Delete the source Elasticsearch resource, then force-delete its Pods.

    PVCs and PVs are left alone: the PVs were set to Retain beforehand and
    the PVCs go away with the Elasticsearch resource's garbage collection.
    """

    name = "delete_source"

    async def run(self, context: MigrationContext, state: MigrationState) -> MigrationState:
        ref = state.require_snapshot().ref
        source = context.source

        context.logger.info("Deleting ES resource in source K8s cluster")
        try:
            await source.delete_elasticsearch(ref.namespace, ref.name)
        except KubernetesAPIError as e:
            raise MutationError(f"failed to delete Elasticsearch {ref}: {e}") from e

        # fresh list: Pods may have been created since the snapshot
        try:
            pods = await source.list_pods(ref.namespace, cluster_selector(ref.name))
        except KubernetesAPIError as e:
            raise MutationError(f"failed to list Pods of Elasticsearch {ref}: {e}") from e

        for pod in pods:
            metadata = pod["metadata"]
            context.logger.info("Force-deleting Pod in source K8s cluster", pod=metadata["name"])
            try:
                # immediate deletion ignoring the pre-stop hook
                await source.delete_pod(
                    metadata.get("namespace") or ref.namespace,
                    metadata["name"],
                    grace_period_seconds=0,
                )
            except ResourceNotFoundError:
                continue
            except KubernetesAPIError as e:
                raise MutationError(f"failed to delete Pod {metadata['name']}: {e}") from e

        return state.completed(self.name)
