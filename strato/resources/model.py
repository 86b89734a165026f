"""Cluster and node pool models.

``*Spec`` classes describe what the caller wants; ``Cluster`` and
``NodePool`` describe what the API last reported.
"""

from __future__ import annotations

from dataclasses import dataclass

from strato.api.types import (
    ClusterCreateParams,
    ClusterResponse,
    NodePoolCreateParams,
    NodePoolResponse,
)
from strato.core.exceptions import ValidationError

# =============================================================================
# Desired state
# =============================================================================


@dataclass(frozen=True, slots=True)
class ClusterSpec:
    """Desired cluster.

    Args:
        name: Cluster name.
        os_cluster_id: OpenStack cluster the workload cluster lives in.
        os_project_id: OpenStack project.
        keypair: OpenStack keypair installed on the worker nodes.
        network_id: OpenStack network id.
        flavor_id: OpenStack flavor of the default node pool.
        volume_size: Worker volume size in GB.
        node_count: Workers in the default node pool.
        private_kube_api: Disable public access to the kube API.
        tags: Free-form cluster tags.
    """

    name: str
    os_cluster_id: str
    os_project_id: str
    keypair: str
    network_id: str
    flavor_id: str
    volume_size: int
    node_count: int
    private_kube_api: bool | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("name", "os_cluster_id", "os_project_id"):
            if not getattr(self, name):
                raise ValidationError(name)

    def to_create_params(self) -> ClusterCreateParams:
        params = ClusterCreateParams(
            name=self.name,
            node_count=self.node_count,
            flavor_id=self.flavor_id,
            network_id=self.network_id,
            keypair=self.keypair,
            volume_size=self.volume_size,
            tags=list(self.tags),
        )
        if self.private_kube_api is not None:
            params["private_kube_api"] = self.private_kube_api
        return params


@dataclass(frozen=True, slots=True)
class NodePoolSpec:
    """Desired node pool. The API normalizes ``name``; see ``NodePool.full_name``."""

    cluster_id: str
    name: str
    flavor_id: str
    network_id: str
    keypair: str
    volume_size: int
    node_count: int

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationError("name")
        if not self.cluster_id:
            raise ValidationError("cluster_id")

    def to_create_params(self) -> NodePoolCreateParams:
        return NodePoolCreateParams(
            name=self.name,
            flavor_id=self.flavor_id,
            network_id=self.network_id,
            keypair=self.keypair,
            volume_size=self.volume_size,
            node_count=self.node_count,
        )


# =============================================================================
# Observed state
# =============================================================================


@dataclass(frozen=True, slots=True)
class Cluster:
    id: str
    name: str
    os_cluster_id: str
    os_project_id: str
    keypair: str
    status: str
    phase: str = ""
    control_plane_name: str = ""
    control_plane_namespace: str = ""
    tags: tuple[str, ...] | None = None
    last_error_id: str = ""
    created_at: int = 0
    updated_at: int = 0
    deleted: bool = False
    deleted_at: int | None = None

    @classmethod
    def from_response(cls, data: ClusterResponse) -> Cluster:
        tags = data.get("tags")
        return cls(
            id=data["id"],
            name=data["name"],
            os_cluster_id=data["cluster_id"],
            os_project_id=data["project_id"],
            keypair=data["keypair"],
            status=data["status"],
            phase=data.get("phase", ""),
            control_plane_name=data.get("control_plane_name", ""),
            control_plane_namespace=data.get("control_plane_namespace", ""),
            tags=tuple(tags) if tags is not None else None,
            last_error_id=data.get("last_error_id", ""),
            created_at=data.get("created_at", 0),
            updated_at=data.get("updated_at", 0),
            deleted=data.get("deleted", False),
            deleted_at=data.get("deleted_at"),
        )


@dataclass(frozen=True, slots=True)
class NodePool:
    id: str
    cluster_id: str
    full_name: str
    flavor_id: str
    network_id: str
    keypair: str
    volume_size: int
    node_count: int
    status: str
    server_group_id: str = ""
    is_default: bool = False
    auto_scale: bool = False
    min_node_count: int = 0
    max_node_count: int = 0
    last_error_id: str = ""
    created_at: int = 0
    updated_at: int = 0
    deleted: bool = False
    deleted_at: int | None = None

    @classmethod
    def from_response(cls, data: NodePoolResponse) -> NodePool:
        return cls(
            id=data["id"],
            cluster_id=data["cluster_id"],
            full_name=data["name"],
            flavor_id=data["flavor_id"],
            network_id=data["network_id"],
            keypair=data["keypair"],
            volume_size=data["volume_size"],
            node_count=data["node_count"],
            status=data["status"],
            server_group_id=data.get("server_group_id", ""),
            is_default=data.get("is_default", False),
            auto_scale=data.get("auto_scale", False),
            min_node_count=data.get("min_node_count", 0),
            max_node_count=data.get("max_node_count", 0),
            last_error_id=data.get("last_error_id", ""),
            created_at=data.get("created_at", 0),
            updated_at=data.get("updated_at", 0),
            deleted=data.get("deleted", False),
            deleted_at=data.get("deleted_at"),
        )
