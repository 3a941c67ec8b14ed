"""Cluster placement resolution and cluster registry readiness detection."""

from mcm_placement.models import (
    Cluster,
    ClusterReference,
    GenericPlacementFields,
    LabelSelector,
    LabelSelectorOperator,
    LabelSelectorRequirement,
    Placement,
)
from mcm_placement.placement import (
    CLUSTER_NAME_LABEL,
    instance_deep_copy,
    is_local_placement,
    resolve_clusters,
)
from mcm_placement.selectors import Selector, convert_label_selector
from mcm_placement.watchdog import (
    ClusterRegistryWatchdog,
    detect_cluster_registry,
    is_cluster_registry_ready,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Models
    "Cluster",
    "ClusterReference",
    "GenericPlacementFields",
    "LabelSelector",
    "LabelSelectorOperator",
    "LabelSelectorRequirement",
    "Placement",
    # Resolution
    "CLUSTER_NAME_LABEL",
    "convert_label_selector",
    "instance_deep_copy",
    "is_local_placement",
    "resolve_clusters",
    "Selector",
    # Readiness
    "ClusterRegistryWatchdog",
    "detect_cluster_registry",
    "is_cluster_registry_ready",
]
