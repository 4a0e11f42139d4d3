"""Wait for the target cluster to run the migrated Elasticsearch cluster."""

from ...constants import CLUSTER_UUID_ANNOTATION, POD_PHASE_RUNNING
from ...core.exceptions import IdentityMismatchError, ResourceNotFoundError
from ...core.polling import poll_until
from ...models import MigrationState, ObjectRef
from .base import MigrationContext, MigrationStep


class ConvergenceWaiter(MigrationStep):
    """Poll the target until every Pod that ran in the source runs again."""

    name = "wait_for_pods"

    async def run(self, context: MigrationContext, state: MigrationState) -> MigrationState:
        await self.wait(context, state.require_snapshot().pod_roster)
        return state.completed(self.name)

    async def wait(self, context: MigrationContext, roster: tuple[ObjectRef, ...]) -> None:
        """Block until all rostered Pods are Running in the target.

        Raises:
            ConvergenceTimeoutError: Some Pods are still missing or not running
            KubernetesAPIError: Any API error other than not found
        """
        if not roster:
            return
        context.logger.info(
            "Waiting for all volumes to be bound and Pods to be running in target cluster",
            pods=len(roster),
        )
        await poll_until(
            lambda: self.all_pods_running(context, roster),
            policy=context.poll_policy,
            cancel_event=context.cancel_event,
            description="target Pods running",
            timeout_message=(
                f"not all Pods are running after {context.poll_policy.max_attempts} retries"
            ),
        )
        context.logger.info("All Pods running in target cluster", pods=len(roster))

    async def all_pods_running(self, context: MigrationContext, roster: tuple[ObjectRef, ...]) -> bool:
        for ref in roster:
            try:
                pod = await context.target.get_pod(ref.namespace, ref.name)
            except ResourceNotFoundError:
                # Pod not created yet
                return False
            if (pod.get("status") or {}).get("phase") != POD_PHASE_RUNNING:
                return False
        return True


class IdentityVerifier(MigrationStep):
    """Poll the target Elasticsearch resource until it reports the source cluster UUID.

    A missing annotation means the cluster has not bootstrapped yet. A
    different UUID means the data was not picked up; that fails at once
    instead of waiting out the retry budget.
    """

    name = "verify_cluster_uuid"

    async def run(self, context: MigrationContext, state: MigrationState) -> MigrationState:
        snapshot = state.require_snapshot()
        cluster_uuid = await self.verify(context, snapshot.ref, snapshot.cluster_uuid)
        return state.completed(self.name, cluster_uuid=cluster_uuid)

    async def verify(self, context: MigrationContext, ref: ObjectRef, expected: str | None) -> str:
        """Return the preserved UUID.

        Raises:
            IdentityMismatchError: The target reports a different UUID
            ConvergenceTimeoutError: No UUID was reported within the retry budget
        """
        context.logger.info(
            "Waiting for Elasticsearch UUID to be reported (previous UUID should be preserved)",
            expected_uuid=expected,
        )

        async def check() -> str | None:
            # NotFound is fatal: the recreate step created this resource
            retrieved = await context.target.get_elasticsearch(ref.namespace, ref.name)
            annotations = (retrieved.get("metadata") or {}).get("annotations") or {}
            actual = annotations.get(CLUSTER_UUID_ANNOTATION)
            if not actual:
                return None
            if actual != expected:
                context.logger.error(
                    "Unexpected: cluster UUID has changed!", uuid=actual, expected_uuid=expected
                )
                raise IdentityMismatchError(expected, actual)
            return actual

        cluster_uuid = await poll_until(
            check,
            policy=context.poll_policy,
            cancel_event=context.cancel_event,
            description="target cluster UUID",
            timeout_message=f"got no UUID after {context.poll_policy.max_attempts} retries",
        )
        context.logger.info("Cluster UUID successfully preserved!", uuid=cluster_uuid)
        return cluster_uuid
