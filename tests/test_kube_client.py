"""Tests for the Kubernetes endpoint wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from kubernetes import client
from urllib3.exceptions import MaxRetryError, ProtocolError
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from es_migrate.constants import CLUSTER_NAME_LABEL, ES_GROUP, ES_PLURAL, ES_VERSION
from es_migrate.core.exceptions import KubernetesAPIError, ResourceNotFoundError, SetupError
from es_migrate.core.kube_client import (
    ClusterEndpoint,
    build_api_client,
    cluster_selector,
    connect_endpoint,
)
from es_migrate.core.settings import MigrationSettings


@pytest.fixture
def endpoint() -> ClusterEndpoint:
    """Endpoint with mocked API groups and a real serializer."""
    endpoint = ClusterEndpoint(client.ApiClient(), role="source", context_name="ctx-a")
    endpoint.core = MagicMock()
    endpoint.custom = MagicMock()
    return endpoint


def test_cluster_selector():
    assert cluster_selector("es1") == f"{CLUSTER_NAME_LABEL}=es1"


class TestClusterEndpoint:
    @pytest.mark.asyncio
    async def test_get_elasticsearch(self, endpoint):
        endpoint.custom.get_namespaced_custom_object.return_value = {"metadata": {"name": "es1"}}

        result = await endpoint.get_elasticsearch("ns", "es1")

        assert result == {"metadata": {"name": "es1"}}
        endpoint.custom.get_namespaced_custom_object.assert_called_once_with(
            ES_GROUP, ES_VERSION, "ns", ES_PLURAL, "es1"
        )

    @pytest.mark.asyncio
    async def test_list_elasticsearches_cluster_wide(self, endpoint):
        endpoint.custom.list_cluster_custom_object.return_value = {"items": [{"metadata": {"name": "a"}}]}

        result = await endpoint.list_elasticsearches()

        assert result == [{"metadata": {"name": "a"}}]
        endpoint.custom.list_cluster_custom_object.assert_called_once_with(ES_GROUP, ES_VERSION, ES_PLURAL)

    @pytest.mark.asyncio
    async def test_create_elasticsearch_uses_body_namespace(self, endpoint):
        body = {"metadata": {"name": "es1", "namespace": "ns"}, "spec": {}}

        await endpoint.create_elasticsearch(body)

        endpoint.custom.create_namespaced_custom_object.assert_called_once_with(
            ES_GROUP, ES_VERSION, "ns", ES_PLURAL, body
        )

    @pytest.mark.asyncio
    async def test_list_pods_returns_wire_dicts(self, endpoint):
        pod = client.V1Pod(
            metadata=client.V1ObjectMeta(name="es1-es-default-0", namespace="ns", resource_version="12"),
            status=client.V1PodStatus(phase="Running"),
        )
        endpoint.core.list_namespaced_pod.return_value = client.V1PodList(items=[pod])

        result = await endpoint.list_pods("ns", cluster_selector("es1"))

        assert result == [
            {
                "metadata": {"name": "es1-es-default-0", "namespace": "ns", "resourceVersion": "12"},
                "status": {"phase": "Running"},
            }
        ]
        endpoint.core.list_namespaced_pod.assert_called_once_with("ns", label_selector=cluster_selector("es1"))

    @pytest.mark.asyncio
    async def test_delete_pod_with_grace_period(self, endpoint):
        await endpoint.delete_pod("ns", "pod-0", grace_period_seconds=0)

        endpoint.core.delete_namespaced_pod.assert_called_once_with("pod-0", "ns", grace_period_seconds=0)

    @pytest.mark.asyncio
    async def test_delete_pod_default_grace_period(self, endpoint):
        await endpoint.delete_pod("ns", "pod-0")

        endpoint.core.delete_namespaced_pod.assert_called_once_with("pod-0", "ns")

    @pytest.mark.asyncio
    async def test_replace_pv_full_object(self, endpoint):
        body = {"metadata": {"name": "pv-0"}, "spec": {"persistentVolumeReclaimPolicy": "Retain"}}
        endpoint.core.replace_persistent_volume.return_value = client.V1PersistentVolume(
            metadata=client.V1ObjectMeta(name="pv-0"),
            spec=client.V1PersistentVolumeSpec(persistent_volume_reclaim_policy="Retain"),
        )

        result = await endpoint.replace_pv(body)

        endpoint.core.replace_persistent_volume.assert_called_once_with("pv-0", body)
        assert result["spec"] == {"persistentVolumeReclaimPolicy": "Retain"}

    @pytest.mark.asyncio
    async def test_create_and_delete_pv(self, endpoint):
        body = {"metadata": {"name": "pv-0"}}
        endpoint.core.create_persistent_volume.return_value = client.V1PersistentVolume(
            metadata=client.V1ObjectMeta(name="pv-0")
        )

        await endpoint.create_pv(body)
        await endpoint.delete_pv("pv-0")

        endpoint.core.create_persistent_volume.assert_called_once_with(body)
        endpoint.core.delete_persistent_volume.assert_called_once_with("pv-0")

    @pytest.mark.asyncio
    async def test_not_found_is_translated(self, endpoint):
        endpoint.core.read_persistent_volume.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(ResourceNotFoundError, match="get PV pv-9: not found in source cluster") as exc_info:
            await endpoint.get_pv("pv-9")

        assert exc_info.value.status == 404
        assert isinstance(exc_info.value.__cause__, ApiException)

    @pytest.mark.asyncio
    async def test_other_api_errors_are_translated(self, endpoint):
        endpoint.core.read_namespaced_pod.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(KubernetesAPIError) as exc_info:
            await endpoint.get_pod("ns", "pod-0")

        assert not isinstance(exc_info.value, ResourceNotFoundError)
        assert exc_info.value.status == 403
        assert exc_info.value.reason == "Forbidden"
        assert "403 Forbidden" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_failures_are_translated(self, endpoint):
        endpoint.core.delete_persistent_volume.side_effect = MaxRetryError(
            None, "/api/v1/persistentvolumes/pv-0", "connection refused"
        )

        with pytest.raises(KubernetesAPIError, match="delete PV pv-0 failed in source cluster") as exc_info:
            await endpoint.delete_pv("pv-0")

        assert not isinstance(exc_info.value, ResourceNotFoundError)
        assert exc_info.value.status is None
        assert isinstance(exc_info.value.__cause__, MaxRetryError)

    @pytest.mark.asyncio
    async def test_connection_reset_is_translated(self, endpoint):
        endpoint.core.read_namespaced_pod.side_effect = ProtocolError("Connection aborted.", ConnectionResetError(104))

        with pytest.raises(KubernetesAPIError, match="Connection aborted"):
            await endpoint.get_pod("ns", "pod-0")

    @pytest.mark.asyncio
    async def test_socket_errors_are_translated(self, endpoint):
        endpoint.custom.get_namespaced_custom_object.side_effect = ConnectionRefusedError(111, "Connection refused")

        with pytest.raises(KubernetesAPIError, match="get Elasticsearch ns/es1 failed in source cluster"):
            await endpoint.get_elasticsearch("ns", "es1")


class TestBuildApiClient:
    def test_loads_context_and_sizes_pool(self):
        with patch("es_migrate.core.kube_client.config.load_kube_config") as mock_load:
            api_client = build_api_client("ctx-a", kubeconfig="/tmp/kubeconfig", pool_maxsize=42)

        kwargs = mock_load.call_args.kwargs
        assert kwargs["context"] == "ctx-a"
        assert kwargs["config_file"] == "/tmp/kubeconfig"
        assert kwargs["client_configuration"] is api_client.configuration
        assert api_client.configuration.connection_pool_maxsize == 42


class TestConnectEndpoint:
    @pytest.mark.asyncio
    async def test_connects_and_probes(self):
        settings = MigrationSettings(client_pool_maxsize=7)
        with (
            patch("es_migrate.core.kube_client.build_api_client", return_value=client.ApiClient()) as mock_build,
            patch.object(ClusterEndpoint, "list_elasticsearches", new_callable=AsyncMock) as mock_probe,
        ):
            endpoint = await connect_endpoint("ctx-b", "target", settings)

        assert endpoint.role == "target"
        assert endpoint.context_name == "ctx-b"
        mock_build.assert_called_once_with("ctx-b", kubeconfig=None, pool_maxsize=7)
        mock_probe.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_context(self):
        with patch(
            "es_migrate.core.kube_client.build_api_client",
            side_effect=ConfigException("Expected key current-context"),
        ):
            with pytest.raises(SetupError, match="cannot load kubeconfig context 'nope'"):
                await connect_endpoint("nope", "source", MigrationSettings())

    @pytest.mark.asyncio
    async def test_unreachable_cluster(self):
        with (
            patch("es_migrate.core.kube_client.build_api_client", return_value=client.ApiClient()),
            patch.object(
                ClusterEndpoint,
                "list_elasticsearches",
                new_callable=AsyncMock,
                side_effect=KubernetesAPIError("list failed", status=404, reason="Not Found"),
            ),
        ):
            with pytest.raises(SetupError, match="cannot reach source cluster"):
                await connect_endpoint("ctx-a", "source", MigrationSettings())

    @pytest.mark.asyncio
    async def test_connection_refused_during_probe(self):
        with (
            patch("es_migrate.core.kube_client.build_api_client", return_value=client.ApiClient()),
            patch.object(
                client.CustomObjectsApi,
                "list_cluster_custom_object",
                side_effect=MaxRetryError(None, "/apis/elasticsearch.k8s.elastic.co/v1/elasticsearches"),
            ),
        ):
            with pytest.raises(SetupError, match="cannot reach target cluster") as exc_info:
                await connect_endpoint("ctx-b", "target", MigrationSettings())

        assert isinstance(exc_info.value.__cause__, KubernetesAPIError)
