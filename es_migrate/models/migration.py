"""Migration request and pipeline state models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .resources import ResourceSnapshot


class MigrationRequest(BaseModel):
    """Which Elasticsearch cluster to move, and between which kubeconfig contexts."""

    namespace: str = Field(min_length=1)
    name: str = Field(min_length=1)
    source_context: str = Field(min_length=1, description="Kubeconfig context of the source cluster")
    target_context: str = Field(min_length=1, description="Kubeconfig context of the target cluster")

    @field_validator("namespace", "name", "source_context", "target_context", mode="before")
    @classmethod
    def strip_value(cls, v):
        """Strip surrounding whitespace so blank values fail the length check."""
        if isinstance(v, str):
            return v.strip()
        return v

    @classmethod
    def from_target(cls, target: str, source_context: str, target_context: str) -> "MigrationRequest":
        """Build a request from a ``<namespace>/<name>`` argument.

        Raises:
            ValueError: ``target`` is not of the form ``<namespace>/<name>``
        """
        namespace, sep, name = target.partition("/")
        if not sep or not namespace or not name or "/" in name:
            raise ValueError(f"invalid argument {target}. Expected 'namespace/name'")
        return cls(
            namespace=namespace,
            name=name,
            source_context=source_context,
            target_context=target_context,
        )


class MigrationState(BaseModel):
    """Immutable result handed from one pipeline step to the next."""

    model_config = ConfigDict(frozen=True)

    snapshot: ResourceSnapshot | None = None
    created_volumes: tuple[str, ...] = Field(default_factory=tuple)
    cluster_uuid: str | None = None
    completed_steps: tuple[str, ...] = Field(default_factory=tuple)

    def require_snapshot(self) -> ResourceSnapshot:
        if self.snapshot is None:
            raise RuntimeError("no resource snapshot: the collect step has not run")
        return self.snapshot

    def completed(self, step_name: str, **updates) -> "MigrationState":
        """Return a copy marking ``step_name`` done, with optional field updates."""
        updates["completed_steps"] = (*self.completed_steps, step_name)
        return self.model_copy(update=updates)
