"""Runtime settings for es-migrate.

Provides centralized configuration using Pydantic BaseSettings with
environment variable support (``ES_MIGRATE_*``) for operational tuning.
Command-line flags take precedence over these values.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_MAX_ATTEMPTS
from .polling import PollPolicy


class MigrationSettings(BaseSettings):
    """Migration tuning and logging configuration."""

    poll_interval_seconds: float = Field(
        DEFAULT_POLL_INTERVAL_SECONDS,
        gt=0,
        description="Delay between two checks of the target cluster",
    )
    poll_max_attempts: int = Field(
        DEFAULT_POLL_MAX_ATTEMPTS,
        ge=1,
        description="Number of checks before giving up on the target cluster",
    )
    client_pool_maxsize: int = Field(
        100, ge=1, description="HTTP connection pool size for each Kubernetes client"
    )
    kubeconfig: str | None = Field(
        default=None, description="Kubeconfig file (defaults to KUBECONFIG or ~/.kube/config)"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str | None = Field(
        default=None, description="Directory for the JSON log file (console only when unset)"
    )
    log_file_size_mb: int = Field(
        10, ge=1, le=100, description="Max log file size before truncation"
    )

    model_config = SettingsConfigDict(env_prefix="ES_MIGRATE_", env_file=".env", extra="ignore")

    def poll_policy(self) -> PollPolicy:
        """Build the poll policy used by the convergence and identity checks."""
        return PollPolicy(
            interval_seconds=self.poll_interval_seconds,
            max_attempts=self.poll_max_attempts,
        )
