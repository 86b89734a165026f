"""Cluster lifecycle: create, read, resize, delete, import."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from strato.convergence import (
    DELETE_ATTEMPTS,
    POLL_INTERVAL,
    ConvergenceMode,
    ResourceKind,
    attempts_for,
    budget_seconds,
)
from strato.core.exceptions import StratoAPIError
from strato.resources.base import ConvergingResource, observer
from strato.resources.model import Cluster, ClusterSpec, NodePool

if TYPE_CHECKING:
    from strato.api.client import StratoClient
    from strato.convergence.loop import Sleep


class ClusterResource(ConvergingResource):
    """Manages clusters, waiting for each change to settle.

    Example:
        async with StratoClient(token) as client:
            clusters = ClusterResource(client)
            cluster = await clusters.create(spec)
            cluster = await clusters.update(cluster.id, node_count=5)
            await clusters.delete(cluster.id)
    """

    def __init__(
        self,
        client: StratoClient,
        *,
        interval: float = POLL_INTERVAL,
        sleep: Sleep | None = None,
    ) -> None:
        super().__init__(interval=interval, sleep=sleep)
        self._client = client
        self._log = logger.bind(component="cluster")

    async def create(self, spec: ClusterSpec, *, cancel: asyncio.Event | None = None) -> Cluster:
        """Create a cluster and wait until it is READY.

        Waits 10 minutes, or 20 when the default pool has more than 3 nodes.
        """
        created = await self._client.create_cluster(
            spec.to_create_params(),
            os_cluster_id=spec.os_cluster_id,
            os_project_id=spec.os_project_id,
        )
        cluster_id = created["id"]
        attempts = attempts_for(spec.node_count)
        self._log.info(
            "Cluster {id} requested, waiting up to {s:.0f}s",
            id=cluster_id, s=budget_seconds(attempts, self._interval),
        )

        converged = await self._wait(
            kind=ResourceKind.CLUSTER,
            fetch=observer(lambda: self._client.get_cluster(cluster_id)),
            attempts=attempts,
            mode=ConvergenceMode.CREATE_OR_UPDATE,
            action="create cluster",
            description=cluster_id,
            cancel=cancel,
        )
        return Cluster.from_response(converged.observation.payload)

    async def read(self, cluster_id: str) -> Cluster:
        return Cluster.from_response(await self._client.get_cluster(cluster_id))

    async def import_state(self, cluster_id: str) -> Cluster:
        """Adopt an existing cluster by id."""
        return await self.read(cluster_id)

    async def default_node_pool(self, cluster_id: str) -> NodePool:
        pools = await self._client.list_node_pools(cluster_id, only_default=True)
        if not pools:
            raise StratoAPIError(f"no default node pool found for cluster {cluster_id}")
        return NodePool.from_response(pools[0])

    async def update(
        self,
        cluster_id: str,
        node_count: int,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Cluster:
        """Resize the cluster's default node pool.

        The cluster itself stays READY during a resize, so the wait is on
        the default node pool, and only when its size actually changes.
        """
        default_pool = await self.default_node_pool(cluster_id)
        await self._client.update_cluster(cluster_id, {"node_count": node_count})

        if default_pool.node_count != node_count:
            self._log.info(
                "Resizing default pool {pool} of cluster {id}: {old} -> {new} nodes",
                pool=default_pool.id, id=cluster_id,
                old=default_pool.node_count, new=node_count,
            )
            await self._wait(
                kind=ResourceKind.NODE_POOL,
                fetch=observer(
                    lambda: self._client.get_node_pool(default_pool.cluster_id, default_pool.id)
                ),
                attempts=attempts_for(node_count),
                mode=ConvergenceMode.CREATE_OR_UPDATE,
                action="update cluster",
                description=default_pool.id,
                cancel=cancel,
            )

        return await self.read(cluster_id)

    async def delete(self, cluster_id: str, *, cancel: asyncio.Event | None = None) -> None:
        """Delete a cluster and wait until the API no longer reports it."""
        await self._client.delete_cluster(cluster_id)
        await self._wait(
            kind=ResourceKind.CLUSTER,
            fetch=observer(lambda: self._client.get_cluster(cluster_id)),
            attempts=DELETE_ATTEMPTS,
            mode=ConvergenceMode.DELETE,
            action="delete cluster",
            description=cluster_id,
            cancel=cancel,
        )
        self._log.info("Cluster {id} deleted", id=cluster_id)
