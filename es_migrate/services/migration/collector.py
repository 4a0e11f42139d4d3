"""Read the Elasticsearch resource, its Pods, PVCs and PVs from the source cluster."""

from ...core.exceptions import CollectionError
from ...core.kube_client import cluster_selector
from ...models import MigrationState, ResourceSnapshot
from .base import MigrationContext, MigrationStep


class ResourceCollector(MigrationStep):
    """Snapshot the source resources. Never writes to either cluster."""

    name = "collect"

    async def run(self, context: MigrationContext, state: MigrationState) -> MigrationState:
        return state.completed(self.name, snapshot=await self.collect(context))

    async def collect(self, context: MigrationContext) -> ResourceSnapshot:
        """Collect the source snapshot.

        Raises:
            ResourceNotFoundError: The Elasticsearch resource or a PV does not exist
            CollectionError: No PVC was found, or a PVC is not bound to a PV
        """
        source = context.source
        namespace, name = context.namespace, context.name
        selector = cluster_selector(name)

        context.logger.info("Retrieving Elasticsearch in source K8s cluster")
        elasticsearch = await source.get_elasticsearch(namespace, name)

        context.logger.info("Retrieving Pods in source K8s cluster")
        pods = await source.list_pods(namespace, selector)

        context.logger.info("Retrieving PVCs in source K8s cluster")
        claims = await source.list_pvcs(namespace, selector)
        if not claims:
            raise CollectionError(f"no PVC found for Elasticsearch {namespace}/{name}")

        volumes = []
        for claim in claims:
            metadata = claim["metadata"]
            volume_name = (claim.get("spec") or {}).get("volumeName")
            if not volume_name:
                raise CollectionError(
                    f"PVC {metadata.get('namespace')}/{metadata['name']} has no spec.volumeName"
                )
            context.logger.info("Retrieving PV in source K8s cluster", pv=volume_name)
            volumes.append(await source.get_pv(volume_name))

        context.logger.info(
            "Collected source resources",
            pods=len(pods),
            pvcs=len(claims),
            pvs=len(volumes),
        )
        return ResourceSnapshot(
            elasticsearch=elasticsearch,
            pods=pods,
            claims=claims,
            volumes=volumes,
        )
