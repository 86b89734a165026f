"""Async HTTP client for the Strato API."""

from __future__ import annotations

from typing import Any

from loguru import logger

from strato.core.exceptions import StratoAPIError
from strato.infra.http import BearerAuth, HttpClient, HttpError

from .types import (
    ClusterCreateParams,
    ClusterResponse,
    ClusterUpdateParams,
    NodePoolCreateParams,
    NodePoolResponse,
    NodePoolUpdateParams,
)

DEFAULT_API_URL = "https://api.cloudportal.run/strato/"
USER_AGENT = "strato-python/0.1.0"


class StratoClient:
    """Async HTTP client for the Strato API.

    Returns TypedDicts directly from API responses. Every call is a single
    request; waiting for asynchronous changes to settle is the job of
    ``strato.convergence``.

    Example:
        async with StratoClient(token="...") as client:
            cluster = await client.get_cluster("8f2c...")
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30,
    ) -> None:
        self._log = logger.bind(component="client")
        self._http = HttpClient(
            base_url,
            BearerAuth(token),
            timeout=timeout,
            default_headers={"Content-Type": "application/json", "User-Agent": USER_AGENT},
        )

    async def __aenter__(self) -> StratoClient:
        return self

    async def __aexit__(self, *_args: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            return await self._http.request(
                method, path, json=json, params=params, headers=headers,
            )
        except HttpError as e:
            if e.status != 404:
                self._log.warning(
                    "API error {method} {path}: {status}",
                    method=method, path=path, status=e.status,
                )
            raise StratoAPIError(f"API error {e.status}: {e.body}", status=e.status) from e

    @staticmethod
    def _require[T](result: T | None, what: str) -> T:
        if not result:
            raise StratoAPIError(f"empty {what} response")
        return result

    # =========================================================================
    # Clusters
    # =========================================================================

    async def create_cluster(
        self,
        params: ClusterCreateParams,
        *,
        os_cluster_id: str,
        os_project_id: str,
    ) -> ClusterResponse:
        """Request a new cluster. Returns while the cluster is still IN_PROGRESS."""
        self._log.debug("Creating cluster {name}", name=params["name"])
        result: ClusterResponse | None = await self._request(
            "POST",
            "/clusters",
            json=dict(params),
            headers={"X-OS-Cluster-ID": os_cluster_id, "X-OS-Project-ID": os_project_id},
        )
        return self._require(result, "cluster")

    async def get_cluster(self, cluster_id: str) -> ClusterResponse:
        result: ClusterResponse | None = await self._request("GET", f"/clusters/{cluster_id}")
        return self._require(result, "cluster")

    async def update_cluster(
        self, cluster_id: str, params: ClusterUpdateParams
    ) -> ClusterResponse:
        self._log.debug("Updating cluster {id}", id=cluster_id)
        result: ClusterResponse | None = await self._request(
            "PATCH", f"/clusters/{cluster_id}", json=dict(params),
        )
        return self._require(result, "cluster")

    async def delete_cluster(self, cluster_id: str) -> ClusterResponse:
        self._log.debug("Deleting cluster {id}", id=cluster_id)
        result: ClusterResponse | None = await self._request(
            "DELETE", f"/clusters/{cluster_id}", json={},
        )
        return self._require(result, "cluster")

    # =========================================================================
    # Node pools
    # =========================================================================

    async def list_node_pools(
        self, cluster_id: str, *, only_default: bool = False
    ) -> list[NodePoolResponse]:
        params = {"only_default": "true"} if only_default else None
        result: list[NodePoolResponse] | None = await self._request(
            "GET", f"/clusters/{cluster_id}/nodepools", params=params,
        )
        if result is None:
            raise StratoAPIError("empty node pools response")
        return result

    async def create_node_pool(
        self, cluster_id: str, params: NodePoolCreateParams
    ) -> NodePoolResponse:
        """Request a new node pool. Returns while the pool is still CREATING."""
        self._log.debug(
            "Creating node pool {name} in cluster {cluster}",
            name=params["name"], cluster=cluster_id,
        )
        result: NodePoolResponse | None = await self._request(
            "POST", f"/clusters/{cluster_id}/nodepools", json=dict(params),
        )
        return self._require(result, "node pool")

    async def get_node_pool(self, cluster_id: str, node_pool_id: str) -> NodePoolResponse:
        result: NodePoolResponse | None = await self._request(
            "GET", f"/clusters/{cluster_id}/nodepools/{node_pool_id}",
        )
        return self._require(result, "node pool")

    async def update_node_pool(
        self, cluster_id: str, node_pool_id: str, params: NodePoolUpdateParams
    ) -> NodePoolResponse:
        self._log.debug("Updating node pool {id}", id=node_pool_id)
        result: NodePoolResponse | None = await self._request(
            "PATCH", f"/clusters/{cluster_id}/nodepools/{node_pool_id}", json=dict(params),
        )
        return self._require(result, "node pool")

    async def delete_node_pool(self, cluster_id: str, node_pool_id: str) -> NodePoolResponse:
        self._log.debug("Deleting node pool {id}", id=node_pool_id)
        result: NodePoolResponse | None = await self._request(
            "DELETE", f"/clusters/{cluster_id}/nodepools/{node_pool_id}", json={},
        )
        return self._require(result, "node pool")
