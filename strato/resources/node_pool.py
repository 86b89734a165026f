"""Node pool lifecycle: create, read, resize, delete, import."""

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
)
from strato.resources.base import ConvergingResource, observer
from strato.resources.model import NodePool, NodePoolSpec

if TYPE_CHECKING:
    from strato.api.client import StratoClient
    from strato.convergence.loop import Sleep


class NodePoolResource(ConvergingResource):
    """Manages node pools of an existing cluster."""

    def __init__(
        self,
        client: StratoClient,
        *,
        interval: float = POLL_INTERVAL,
        sleep: Sleep | None = None,
    ) -> None:
        super().__init__(interval=interval, sleep=sleep)
        self._client = client
        self._log = logger.bind(component="node_pool")

    def _observe(self, cluster_id: str, node_pool_id: str):
        return observer(lambda: self._client.get_node_pool(cluster_id, node_pool_id))

    async def create(
        self, spec: NodePoolSpec, *, cancel: asyncio.Event | None = None
    ) -> NodePool:
        created = await self._client.create_node_pool(spec.cluster_id, spec.to_create_params())
        node_pool_id = created["id"]
        self._log.info(
            "Node pool {id} requested in cluster {cluster} ({n} nodes)",
            id=node_pool_id, cluster=spec.cluster_id, n=spec.node_count,
        )

        converged = await self._wait(
            kind=ResourceKind.NODE_POOL,
            fetch=self._observe(spec.cluster_id, node_pool_id),
            attempts=attempts_for(spec.node_count),
            mode=ConvergenceMode.CREATE_OR_UPDATE,
            action="create node pool",
            description=node_pool_id,
            cancel=cancel,
        )
        return NodePool.from_response(converged.observation.payload)

    async def read(self, cluster_id: str, node_pool_id: str) -> NodePool:
        return NodePool.from_response(await self._client.get_node_pool(cluster_id, node_pool_id))

    async def import_state(self, cluster_id: str, node_pool_id: str) -> NodePool:
        return await self.read(cluster_id, node_pool_id)

    async def update(
        self,
        cluster_id: str,
        node_pool_id: str,
        node_count: int,
        *,
        cancel: asyncio.Event | None = None,
    ) -> NodePool:
        """Resize a node pool and wait until it is READY again.

        The budget follows the new size, not the old one.
        """
        await self._client.update_node_pool(cluster_id, node_pool_id, {"node_count": node_count})
        await self._wait(
            kind=ResourceKind.NODE_POOL,
            fetch=self._observe(cluster_id, node_pool_id),
            attempts=attempts_for(node_count),
            mode=ConvergenceMode.CREATE_OR_UPDATE,
            action="update node pool",
            description=node_pool_id,
            cancel=cancel,
        )
        return await self.read(cluster_id, node_pool_id)

    async def delete(
        self, cluster_id: str, node_pool_id: str, *, cancel: asyncio.Event | None = None
    ) -> None:
        await self._client.delete_node_pool(cluster_id, node_pool_id)
        await self._wait(
            kind=ResourceKind.NODE_POOL,
            fetch=self._observe(cluster_id, node_pool_id),
            attempts=DELETE_ATTEMPTS,
            mode=ConvergenceMode.DELETE,
            action="delete node pool",
            description=node_pool_id,
            cancel=cancel,
        )
        self._log.info("Node pool {id} deleted", id=node_pool_id)
