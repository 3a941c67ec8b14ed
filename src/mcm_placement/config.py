"""Configuration for cluster placement resolution."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_ACCOUNT_TOKEN_PATH = Path("/var/run/secrets/kubernetes.io/serviceaccount/token")


class AuthMode(str, Enum):
    """How to authenticate against the hub cluster."""

    AUTO = "auto"
    KUBECONFIG = "kubeconfig"
    IN_CLUSTER = "in_cluster"


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class PlacementConfig(BaseSettings):
    """Settings for the cluster registry client and readiness watchdog.

    Loaded from environment variables with MCM_PLACEMENT_ prefix
    or from a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MCM_PLACEMENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Kubernetes access
    auth_mode: AuthMode = Field(
        default=AuthMode.AUTO,
        description="Authentication mode for the Kubernetes API",
    )
    kubeconfig_path: str | None = Field(
        default=None,
        description="Path to kubeconfig file (default: ~/.kube/config)",
    )
    kubeconfig_context: str | None = Field(
        default=None,
        description="Kubeconfig context to use",
    )

    # Cluster registry CRD
    registry_group: str = Field(
        default="clusterregistry.k8s.io",
        description="API group of the Cluster resource",
    )
    registry_version: str = Field(
        default="v1alpha1",
        description="API version of the Cluster resource",
    )
    registry_plural: str = Field(
        default="clusters",
        description="Plural resource name of the Cluster resource",
    )

    # Readiness watchdog
    registry_poll_interval: float = Field(
        default=10.0,
        gt=0.0,
        description="Seconds between cluster registry readiness probes",
    )

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )

    def effective_auth_mode(self) -> AuthMode:
        """Resolve AUTO to a concrete auth mode."""
        if self.auth_mode != AuthMode.AUTO:
            return self.auth_mode
        if SERVICE_ACCOUNT_TOKEN_PATH.exists():
            return AuthMode.IN_CLUSTER
        return AuthMode.KUBECONFIG


@lru_cache
def get_config() -> PlacementConfig:
    """Get the process-wide configuration."""
    return PlacementConfig()
