"""Kubernetes API endpoints for the source and target clusters.

Each endpoint wraps one ``kubernetes`` API client built from a kubeconfig
context. The SDK is synchronous, so every call runs in a worker thread via
``asyncio.to_thread``; callers await each call before issuing the next one.
Objects are returned as plain dictionaries in their wire shape (camelCase keys)
so the Elasticsearch custom resource and core resources are handled the same way.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import structlog
import urllib3
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from ..constants import CLUSTER_NAME_LABEL, ES_GROUP, ES_PLURAL, ES_VERSION
from ..models import KubeObject
from .exceptions import KubernetesAPIError, ResourceNotFoundError, SetupError
from .settings import MigrationSettings

logger = structlog.get_logger("es_migrate")


def cluster_selector(name: str) -> str:
    """Label selector matching Pods and PVCs of the named Elasticsearch cluster."""
    return f"{CLUSTER_NAME_LABEL}={name}"


class ClusterEndpoint:
    """Typed get/list/create/update/delete operations against one Kubernetes cluster."""

    def __init__(self, api_client: client.ApiClient, role: str, context_name: str = ""):
        self.api_client = api_client
        self.role = role
        self.context_name = context_name
        self.core = client.CoreV1Api(api_client)
        self.custom = client.CustomObjectsApi(api_client)
        self.logger = logger.bind(component="cluster_endpoint", role=role, context=context_name)

    async def _call(self, description: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a blocking SDK call in a thread and translate API and transport errors."""
        self.logger.debug("api_call", description=description)
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except ApiException as e:
            if e.status == 404:
                raise ResourceNotFoundError(
                    f"{description}: not found in {self.role} cluster",
                    status=e.status,
                    reason=e.reason,
                ) from e
            raise KubernetesAPIError(
                f"{description} failed in {self.role} cluster: {e.status} {e.reason}",
                status=e.status,
                reason=e.reason,
            ) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise KubernetesAPIError(f"{description} failed in {self.role} cluster: {e}") from e

    def _to_dict(self, obj: Any) -> Any:
        return self.api_client.sanitize_for_serialization(obj)

    # Elasticsearch (custom resource)

    async def get_elasticsearch(self, namespace: str, name: str) -> KubeObject:
        return await self._call(
            f"get Elasticsearch {namespace}/{name}",
            self.custom.get_namespaced_custom_object,
            ES_GROUP,
            ES_VERSION,
            namespace,
            ES_PLURAL,
            name,
        )

    async def list_elasticsearches(self) -> list[KubeObject]:
        result = await self._call(
            "list Elasticsearch resources",
            self.custom.list_cluster_custom_object,
            ES_GROUP,
            ES_VERSION,
            ES_PLURAL,
        )
        return list(result.get("items", []))

    async def create_elasticsearch(self, body: KubeObject) -> KubeObject:
        metadata = body["metadata"]
        return await self._call(
            f"create Elasticsearch {metadata['namespace']}/{metadata['name']}",
            self.custom.create_namespaced_custom_object,
            ES_GROUP,
            ES_VERSION,
            metadata["namespace"],
            ES_PLURAL,
            body,
        )

    async def delete_elasticsearch(self, namespace: str, name: str) -> None:
        await self._call(
            f"delete Elasticsearch {namespace}/{name}",
            self.custom.delete_namespaced_custom_object,
            ES_GROUP,
            ES_VERSION,
            namespace,
            ES_PLURAL,
            name,
        )

    # Pods

    async def list_pods(self, namespace: str, label_selector: str) -> list[KubeObject]:
        result = await self._call(
            f"list Pods in {namespace} ({label_selector})",
            self.core.list_namespaced_pod,
            namespace,
            label_selector=label_selector,
        )
        return [self._to_dict(item) for item in result.items]

    async def get_pod(self, namespace: str, name: str) -> KubeObject:
        result = await self._call(
            f"get Pod {namespace}/{name}", self.core.read_namespaced_pod, name, namespace
        )
        return self._to_dict(result)

    async def delete_pod(
        self, namespace: str, name: str, grace_period_seconds: int | None = None
    ) -> None:
        kwargs: dict[str, Any] = {}
        if grace_period_seconds is not None:
            kwargs["grace_period_seconds"] = grace_period_seconds
        await self._call(
            f"delete Pod {namespace}/{name}",
            self.core.delete_namespaced_pod,
            name,
            namespace,
            **kwargs,
        )

    # PersistentVolumeClaims

    async def list_pvcs(self, namespace: str, label_selector: str) -> list[KubeObject]:
        result = await self._call(
            f"list PVCs in {namespace} ({label_selector})",
            self.core.list_namespaced_persistent_volume_claim,
            namespace,
            label_selector=label_selector,
        )
        return [self._to_dict(item) for item in result.items]

    # PersistentVolumes (cluster-scoped)

    async def get_pv(self, name: str) -> KubeObject:
        result = await self._call(f"get PV {name}", self.core.read_persistent_volume, name)
        return self._to_dict(result)

    async def replace_pv(self, body: KubeObject) -> KubeObject:
        name = body["metadata"]["name"]
        result = await self._call(
            f"update PV {name}", self.core.replace_persistent_volume, name, body
        )
        return self._to_dict(result)

    async def create_pv(self, body: KubeObject) -> KubeObject:
        result = await self._call(
            f"create PV {body['metadata']['name']}", self.core.create_persistent_volume, body
        )
        return self._to_dict(result)

    async def delete_pv(self, name: str) -> None:
        await self._call(f"delete PV {name}", self.core.delete_persistent_volume, name)


def build_api_client(
    context_name: str, kubeconfig: str | None = None, pool_maxsize: int = 100
) -> client.ApiClient:
    """Build an API client for a kubeconfig context."""
    configuration = client.Configuration()
    config.load_kube_config(
        config_file=kubeconfig,
        context=context_name,
        client_configuration=configuration,
    )
    # speed things up a bit
    configuration.connection_pool_maxsize = pool_maxsize
    return client.ApiClient(configuration)


async def connect_endpoint(
    context_name: str, role: str, settings: MigrationSettings | None = None
) -> ClusterEndpoint:
    """Create an endpoint for a kubeconfig context and check it can reach the cluster.

    Connectivity is probed by listing Elasticsearch resources, which also
    verifies that the ECK custom resource definition is installed.

    Raises:
        SetupError: The context cannot be loaded or the cluster is unreachable
    """
    settings = settings or MigrationSettings()
    log = logger.bind(component="cluster_endpoint", role=role, context=context_name)

    try:
        api_client = build_api_client(
            context_name,
            kubeconfig=settings.kubeconfig,
            pool_maxsize=settings.client_pool_maxsize,
        )
    except (ConfigException, OSError) as e:
        raise SetupError(f"cannot load kubeconfig context {context_name!r}: {e}") from e

    endpoint = ClusterEndpoint(api_client, role=role, context_name=context_name)
    try:
        await endpoint.list_elasticsearches()
    except KubernetesAPIError as e:
        raise SetupError(f"cannot reach {role} cluster (context {context_name!r}): {e}") from e

    log.info("Connected to Kubernetes cluster")
    return endpoint
