"""Core exceptions for es-migrate operations."""


class MigrationError(Exception):
    """Base exception for migration operations."""


class ValidationError(MigrationError):
    """Command-line arguments are malformed or incomplete."""


class SetupError(MigrationError):
    """Kubeconfig context resolution or connectivity check failed."""


class KubernetesAPIError(MigrationError):
    """Kubernetes API call failed."""

    def __init__(self, message: str, status: int | None = None, reason: str | None = None):
        super().__init__(message)
        self.status = status
        self.reason = reason


class ResourceNotFoundError(KubernetesAPIError):
    """Requested Kubernetes object does not exist."""


class CollectionError(MigrationError):
    """Source resources are missing or incomplete; nothing was modified."""


class MutationError(MigrationError):
    """A create, update or delete failed part-way through the migration."""


class RecreationError(MutationError):
    """Recreating resources on the target cluster failed."""

    def __init__(self, message: str, created_volumes: list[str] | None = None):
        super().__init__(message)
        self.created_volumes = list(created_volumes or [])


class ConvergenceTimeoutError(MigrationError):
    """Retry budget exhausted before the target cluster converged."""


class IdentityMismatchError(MigrationError):
    """Target cluster reports a different cluster UUID than the source."""

    def __init__(self, expected: str | None, actual: str):
        super().__init__(f"expected UUID {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class MigrationCancelledError(MigrationError):
    """Migration was cancelled while waiting on the target cluster."""
