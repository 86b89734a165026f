"""Read-only lookups of existing clusters and node pools.

Unlike the resource managers these never wait: they report whatever the
API says right now, including transitional statuses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from strato.resources.model import Cluster, NodePool

if TYPE_CHECKING:
    from strato.api.client import StratoClient


class ClusterDataSource:
    def __init__(self, client: StratoClient) -> None:
        self._client = client

    async def read(self, cluster_id: str) -> Cluster:
        return Cluster.from_response(await self._client.get_cluster(cluster_id))


class NodePoolDataSource:
    def __init__(self, client: StratoClient) -> None:
        self._client = client

    async def read(self, cluster_id: str, node_pool_id: str) -> NodePool:
        return NodePool.from_response(await self._client.get_node_pool(cluster_id, node_pool_id))

    async def list_node_pools(
        self, cluster_id: str, *, only_default: bool = False
    ) -> list[NodePool]:
        pools = await self._client.list_node_pools(cluster_id, only_default=only_default)
        return [NodePool.from_response(p) for p in pools]
