"""Placement resolution against the cluster registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from mcm_placement.models import (
    Cluster,
    GenericPlacementFields,
    LabelSelector,
    LabelSelectorOperator,
    LabelSelectorRequirement,
    Placement,
)
from mcm_placement.selectors import convert_label_selector
from mcm_placement.utils.errors import CopyError, NotFoundError

if TYPE_CHECKING:
    from mcm_placement.registry import ClusterReader

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Registered clusters are expected to carry this label set to their own name.
CLUSTER_NAME_LABEL = "name"


def is_local_placement(placement: Placement | None) -> bool:
    """Return True if the workload should only go to the local cluster."""
    if placement is None or placement.local is None:
        return False
    return placement.local


def name_selector(names: list[str]) -> LabelSelector:
    """Build a selector matching clusters by their ``name`` label."""
    return LabelSelector(
        match_expressions=[
            LabelSelectorRequirement(
                key=CLUSTER_NAME_LABEL,
                operator=LabelSelectorOperator.IN.value,
                values=list(names),
            )
        ]
    )


def resolve_clusters(
    placement: GenericPlacementFields, registry: ClusterReader
) -> dict[str, Cluster]:
    """Resolve a placement into the registered clusters it selects.

    Explicit cluster names take priority and the label selector is then
    ignored. Otherwise the label selector is used as given; no selector
    matches every registered cluster.

    Selection by name relies on every registered cluster being labeled
    ``name=<cluster name>``. Clusters missing that label are not found.

    Args:
        placement: Placement criteria.
        registry: Cluster registry to list from.

    Returns:
        Mapping of cluster name to a copy of the cluster, owned by the caller.
        Empty when nothing matches or the registry has no clusters.

    Raises:
        SelectorConversionError: If the selector is malformed.
        RegistryListError: If listing fails for a reason other than not-found.
    """
    by_name = bool(placement.clusters)
    if by_name:
        label_selector: LabelSelector | None = name_selector(
            [ref.name for ref in placement.clusters]
        )
    else:
        label_selector = placement.cluster_selector

    selector = convert_label_selector(label_selector)
    logger.debug(f"Using cluster label selector: {str(selector) or '<everything>'}")

    try:
        clusters = registry.list_clusters(selector)
    except NotFoundError as e:
        logger.debug(f"No clusters listed: {e}")
        clusters = []
    except Exception as e:
        logger.error(f"Listing clusters failed: {e}")
        raise

    logger.debug(f"Listed clusters: {[cl.name for cl in clusters]}")

    resolved: dict[str, Cluster] = {}
    for cl in clusters:
        if by_name and cl.labels.get(CLUSTER_NAME_LABEL) != cl.name:
            logger.warning(
                f"Cluster {cl.name} has label {CLUSTER_NAME_LABEL}="
                f"{cl.labels.get(CLUSTER_NAME_LABEL)!r}, expected its own name"
            )
        resolved[cl.name] = cl.model_copy(deep=True)

    return resolved


def instance_deep_copy(source: Any, target_type: type[T]) -> T:
    """Copy ``source`` into a new ``target_type`` value via JSON.

    Raises:
        CopyError: If ``source`` cannot be serialized or the result does not
            validate as ``target_type``.
    """
    try:
        data = TypeAdapter(type(source)).dump_json(source, by_alias=True)
        return TypeAdapter(target_type).validate_json(data)
    except (PydanticSchemaGenerationError, PydanticSerializationError, ValidationError) as e:
        raise CopyError(f"Failed to copy {type(source).__name__}: {e}") from e
