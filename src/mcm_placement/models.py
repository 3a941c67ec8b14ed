"""Pydantic models for placements, label selectors and registered clusters."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class K8sModel(BaseModel):
    """Base model accepting both Kubernetes camelCase and snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LabelSelectorOperator(str, Enum):
    """Set-based operators for label selector match expressions."""

    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


class LabelSelectorRequirement(K8sModel):
    """A single set-based match expression.

    The operator is stored as given so that unknown operators are reported
    when the selector is converted rather than when it is parsed.
    """

    key: str = Field(..., description="Label key the requirement applies to")
    operator: str = Field(..., description="One of In, NotIn, Exists, DoesNotExist")
    values: list[str] = Field(default_factory=list, description="Values for In/NotIn")


class LabelSelector(K8sModel):
    """Equality and set-based label query."""

    match_labels: dict[str, str] = Field(default_factory=dict)
    match_expressions: list[LabelSelectorRequirement] = Field(default_factory=list)


class ClusterReference(K8sModel):
    """Reference to a registered cluster by name."""

    name: str


class GenericPlacementFields(K8sModel):
    """Cluster selection criteria shared by placement rules.

    Explicit cluster names take precedence over the label selector.
    """

    clusters: list[ClusterReference] = Field(default_factory=list)
    cluster_selector: LabelSelector | None = Field(None)


class Placement(GenericPlacementFields):
    """Placement of a workload, optionally restricted to the local cluster."""

    local: bool | None = Field(None, description="Place only on the local cluster")


class ClusterMetadata(K8sModel):
    """Object metadata of a registered cluster."""

    name: str = Field(..., description="Cluster name")
    namespace: str | None = Field(None)
    uid: str | None = Field(None)
    resource_version: str | None = Field(None)
    creation_timestamp: datetime | None = Field(None)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class ServerAddressByClientCIDR(K8sModel):
    """API server address to use for clients in a given network."""

    client_cidr: str = Field("", alias="clientCIDR")
    server_address: str = Field("")


class KubernetesAPIEndpoints(K8sModel):
    """Endpoints of the cluster's Kubernetes API server."""

    server_endpoints: list[ServerAddressByClientCIDR] = Field(default_factory=list)
    ca_bundle: str | None = Field(None)


class ObjectReference(K8sModel):
    """Reference to an object holding cluster credentials."""

    kind: str | None = Field(None)
    name: str | None = Field(None)
    namespace: str | None = Field(None)


class AuthInfo(K8sModel):
    """How to authenticate against the cluster."""

    controller: ObjectReference | None = Field(None)
    user: ObjectReference | None = Field(None)


class ClusterSpec(K8sModel):
    """Registry-side description of how to reach a cluster."""

    kubernetes_api_endpoints: KubernetesAPIEndpoints = Field(
        default_factory=KubernetesAPIEndpoints
    )
    auth_info: AuthInfo = Field(default_factory=AuthInfo)


class ClusterCondition(K8sModel):
    """Observed condition of a cluster."""

    type: str
    status: str
    last_heartbeat_time: datetime | None = Field(None)
    last_transition_time: datetime | None = Field(None)
    reason: str | None = Field(None)
    message: str | None = Field(None)


class ClusterStatus(K8sModel):
    """Observed status of a cluster."""

    conditions: list[ClusterCondition] = Field(default_factory=list)


class Cluster(K8sModel):
    """A cluster registered in the cluster registry."""

    api_version: str = Field("clusterregistry.k8s.io/v1alpha1")
    kind: str = Field("Cluster")
    metadata: ClusterMetadata
    spec: ClusterSpec = Field(default_factory=ClusterSpec)
    status: ClusterStatus = Field(default_factory=ClusterStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.labels

    @classmethod
    def from_k8s(cls, obj: dict[str, Any]) -> "Cluster":
        """Create from a registry object as returned by the custom objects API.

        Null labels, annotations or conditions are treated as empty.
        """
        data = dict(obj)
        metadata = dict(data.get("metadata") or {})
        for key in ("labels", "annotations"):
            if metadata.get(key) is None:
                metadata.pop(key, None)
        data["metadata"] = metadata
        for key in ("spec", "status"):
            if data.get(key) is None:
                data.pop(key, None)
        return cls.model_validate(data)

    def to_k8s(self) -> dict[str, Any]:
        """Serialize back into the registry's camelCase representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
