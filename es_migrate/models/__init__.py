"""Data models for es-migrate."""

from .migration import MigrationRequest, MigrationState  # noqa: F401
from .resources import KubeObject, ObjectRef, ResourceSnapshot  # noqa: F401

__all__ = [
    "KubeObject",
    "MigrationRequest",
    "MigrationState",
    "ObjectRef",
    "ResourceSnapshot",
]
