"""Snapshot models for the resources read from the source cluster."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..constants import CLUSTER_UUID_ANNOTATION

KubeObject = dict[str, Any]


class ObjectRef(BaseModel):
    """Namespace/name reference to a Kubernetes object."""

    model_config = ConfigDict(frozen=True)

    namespace: str = ""
    name: str

    @classmethod
    def of(cls, obj: KubeObject) -> "ObjectRef":
        metadata = obj.get("metadata") or {}
        return cls(namespace=metadata.get("namespace") or "", name=metadata["name"])

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name


class ResourceSnapshot(BaseModel):
    """Everything read from the source cluster before anything is modified.

    Objects are kept in their wire shape. The snapshot is never mutated;
    steps that need to change an object deep-copy it first.
    """

    model_config = ConfigDict(frozen=True)

    elasticsearch: KubeObject
    pods: tuple[KubeObject, ...] = Field(default_factory=tuple)
    claims: tuple[KubeObject, ...] = Field(default_factory=tuple)
    volumes: tuple[KubeObject, ...] = Field(default_factory=tuple)

    @property
    def ref(self) -> ObjectRef:
        return ObjectRef.of(self.elasticsearch)

    @property
    def cluster_uuid(self) -> str | None:
        annotations = self.elasticsearch.get("metadata", {}).get("annotations") or {}
        return annotations.get(CLUSTER_UUID_ANNOTATION) or None

    @property
    def pod_roster(self) -> tuple[ObjectRef, ...]:
        return tuple(ObjectRef.of(pod) for pod in self.pods)

    @property
    def volume_names(self) -> list[str]:
        return [volume["metadata"]["name"] for volume in self.volumes]
