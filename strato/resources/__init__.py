from strato.resources.cluster import ClusterResource
from strato.resources.data_sources import ClusterDataSource, NodePoolDataSource
from strato.resources.model import Cluster, ClusterSpec, NodePool, NodePoolSpec
from strato.resources.node_pool import NodePoolResource

__all__ = [
    "Cluster",
    "ClusterDataSource",
    "ClusterResource",
    "ClusterSpec",
    "NodePool",
    "NodePoolDataSource",
    "NodePoolResource",
    "NodePoolSpec",
]
