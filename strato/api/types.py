"""Strato API payload types.

TypedDicts for request and response bodies - no conversion needed.
Timestamps are unix seconds.
"""

from __future__ import annotations

from typing import NotRequired, TypedDict

# =============================================================================
# Response Types
# =============================================================================


class ClusterResponse(TypedDict):
    """Cluster as returned by the Strato API."""

    id: str
    name: str
    cluster_id: str  # OpenStack cluster
    project_id: str  # OpenStack project
    keypair: str
    status: str  # IN_PROGRESS, DELETING, ERROR, READY
    phase: NotRequired[str]
    control_plane_name: NotRequired[str]
    control_plane_namespace: NotRequired[str]
    tags: NotRequired[list[str] | None]
    last_error_id: NotRequired[str]
    created_at: NotRequired[int]
    updated_at: NotRequired[int]
    deleted: NotRequired[bool]
    deleted_at: NotRequired[int | None]


class NodePoolResponse(TypedDict):
    """Node pool as returned by the Strato API."""

    id: str
    cluster_id: str
    name: str  # normalized by the API, includes a prefix
    flavor_id: str
    network_id: str
    keypair: str
    volume_size: int
    node_count: int
    status: str  # CREATING, RESIZING, DELETING, ERROR, READY
    server_group_id: NotRequired[str]
    is_default: NotRequired[bool]
    auto_scale: NotRequired[bool]
    min_node_count: NotRequired[int]
    max_node_count: NotRequired[int]
    last_error_id: NotRequired[str]
    created_at: NotRequired[int]
    updated_at: NotRequired[int]
    deleted: NotRequired[bool]
    deleted_at: NotRequired[int | None]


# =============================================================================
# Request Types
# =============================================================================


class ClusterCreateParams(TypedDict):
    name: str
    node_count: int
    flavor_id: str
    network_id: str
    keypair: str
    volume_size: int
    tags: list[str]
    private_kube_api: NotRequired[bool]


class ClusterUpdateParams(TypedDict):
    node_count: int


class NodePoolCreateParams(TypedDict):
    name: str
    flavor_id: str
    network_id: str
    keypair: str
    volume_size: int
    node_count: int


class NodePoolUpdateParams(TypedDict):
    node_count: int
