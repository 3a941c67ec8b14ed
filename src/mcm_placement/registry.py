"""Read access to the cluster registry.

The cluster registry is a Kubernetes custom resource (``Cluster`` in
``clusterregistry.k8s.io/v1alpha1`` by default) that may be installed after
this process starts. Listing it when the CRD is absent yields a 404, which
is reported as ``NotFoundError`` so callers can tell "nothing registered"
apart from transport or permission failures.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from kubernetes import client as k8s_client  # type: ignore[import-untyped]
from kubernetes import config as k8s_config  # type: ignore[import-untyped]
from kubernetes.client import ApiException  # type: ignore[import-untyped]
from pydantic import ValidationError

from mcm_placement.config import AuthMode, PlacementConfig, get_config
from mcm_placement.models import Cluster
from mcm_placement.utils.errors import ConfigurationError, NotFoundError, RegistryListError

if TYPE_CHECKING:
    from mcm_placement.selectors import Selector

logger = logging.getLogger(__name__)


class ClusterReader(Protocol):
    """Read-only view of registered clusters."""

    def list_clusters(self, selector: Selector | None = None) -> list[Cluster]:
        """List clusters whose labels match ``selector`` (all when None).

        Raises:
            NotFoundError: If the cluster collection does not exist.
            RegistryListError: On any other failure.
        """
        ...


class KubernetesClusterRegistry:
    """Cluster registry client backed by the Kubernetes custom objects API."""

    def __init__(
        self,
        config: PlacementConfig | None = None,
        api: Any | None = None,
    ) -> None:
        self._config = config or get_config()
        self._custom_api = api

    @property
    def is_connected(self) -> bool:
        return self._custom_api is not None

    def connect(self) -> None:
        """Load Kubernetes credentials and create the API client.

        Raises:
            ConfigurationError: If no usable configuration is found.
        """
        mode = self._config.effective_auth_mode()
        try:
            if mode == AuthMode.IN_CLUSTER:
                logger.debug("Loading in-cluster Kubernetes configuration")
                k8s_config.load_incluster_config()
            else:
                logger.debug(
                    f"Loading kubeconfig {self._config.kubeconfig_path or '(default)'} "
                    f"context {self._config.kubeconfig_context or '(current)'}"
                )
                k8s_config.load_kube_config(
                    config_file=self._config.kubeconfig_path,
                    context=self._config.kubeconfig_context,
                )
        except k8s_config.ConfigException as e:
            raise ConfigurationError(f"Failed to load Kubernetes configuration: {e}") from e

        self._custom_api = k8s_client.CustomObjectsApi()
        logger.info(f"Connected to Kubernetes API ({mode.value})")

    @property
    def custom_api(self) -> Any:
        if self._custom_api is None:
            self.connect()
        return self._custom_api

    def list_clusters(self, selector: Selector | None = None) -> list[Cluster]:
        """List registered clusters matching ``selector``.

        Raises:
            NotFoundError: If the Cluster resource is not installed.
            RegistryListError: On API, transport or decoding failures.
        """
        kwargs: dict[str, Any] = {}
        if selector is not None and not selector.empty():
            kwargs["label_selector"] = str(selector)

        resource = (
            f"{self._config.registry_plural}.{self._config.registry_group}"
            f"/{self._config.registry_version}"
        )
        try:
            response = self.custom_api.list_cluster_custom_object(
                group=self._config.registry_group,
                version=self._config.registry_version,
                plural=self._config.registry_plural,
                **kwargs,
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(resource) from e
            raise RegistryListError(
                f"Failed to list {resource}: {e.status} {e.reason}", status=e.status
            ) from e
        except (ConfigurationError, RegistryListError):
            raise
        except Exception as e:
            raise RegistryListError(f"Failed to list {resource}: {e}") from e

        items = (response or {}).get("items") or []
        try:
            return [Cluster.from_k8s(item) for item in items]
        except ValidationError as e:
            raise RegistryListError(f"Malformed {resource} object: {e}") from e
