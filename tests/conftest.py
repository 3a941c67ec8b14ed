"""Shared fixtures for placement tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Callable
from typing import Any

import pytest

from mcm_placement.models import Cluster
from mcm_placement.selectors import Selector
from mcm_placement.utils.errors import NotFoundError


def _make_cluster(
    name: str,
    labels: dict[str, str] | None = None,
    name_label: bool = True,
    server_address: str | None = None,
) -> Cluster:
    """Create a registry cluster, labeled with its own name by default."""
    all_labels = {"name": name} if name_label else {}
    all_labels.update(labels or {})
    obj: dict[str, Any] = {
        "apiVersion": "clusterregistry.k8s.io/v1alpha1",
        "kind": "Cluster",
        "metadata": {
            "name": name,
            "namespace": name,
            "uid": f"cluster-{name}-uid-12345",
            "creationTimestamp": "2025-01-15T10:00:00Z",
            "labels": all_labels,
        },
        "spec": {
            "kubernetesApiEndpoints": {
                "serverEndpoints": [
                    {
                        "clientCIDR": "0.0.0.0/0",
                        "serverAddress": server_address or f"https://api.{name}.example.com:6443",
                    }
                ]
            }
        },
        "status": {
            "conditions": [
                {
                    "type": "OK",
                    "status": "True",
                    "lastHeartbeatTime": "2025-01-15T10:05:00Z",
                }
            ]
        },
    }
    return Cluster.from_k8s(obj)


@dataclass
class FakeClusterRegistry:
    """In-memory cluster registry evaluating selectors like the API server."""

    clusters: list[Cluster] = field(default_factory=list)
    installed: bool = True
    calls: list[Selector | None] = field(default_factory=list)

    def list_clusters(self, selector: Selector | None = None) -> list[Cluster]:
        self.calls.append(selector)
        if not self.installed:
            raise NotFoundError("clusters.clusterregistry.k8s.io/v1alpha1")
        return [
            cl for cl in self.clusters if selector is None or selector.matches(cl.labels)
        ]


@pytest.fixture
def registry() -> FakeClusterRegistry:
    """Registry with two prod clusters, one staging cluster and one unlabeled env."""
    return FakeClusterRegistry(
        clusters=[
            _make_cluster("c1", {"env": "prod", "region": "us-east"}),
            _make_cluster("c2", {"env": "prod", "region": "eu-west"}),
            _make_cluster("c3", {"env": "staging", "region": "us-east"}),
            _make_cluster("c4"),
        ]
    )


@pytest.fixture
def make_cluster() -> Callable[..., Cluster]:
    """Factory for registry clusters, labeled with their own name by default."""
    return _make_cluster


@pytest.fixture
def make_registry() -> Callable[..., FakeClusterRegistry]:
    """Factory for in-memory registries holding the given clusters."""

    def _make(*clusters: Cluster, installed: bool = True) -> FakeClusterRegistry:
        return FakeClusterRegistry(clusters=list(clusters), installed=installed)

    return _make
