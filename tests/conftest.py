"""Shared fixtures: an in-memory Strato API served by aiohttp.

Each resource can carry a script of states that successive GETs walk
through, which is how tests drive a resource from IN_PROGRESS to READY
(or into ERROR, or out of existence).
"""

from __future__ import annotations

import itertools
from collections.abc import AsyncIterator
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from strato.api.client import StratoClient

TOKEN = "test-token"

GONE = "<gone>"
DELETED = "<deleted>"


class FakeStrato:
    """In-memory stand-in for the Strato API."""

    def __init__(self) -> None:
        self.clusters: dict[str, dict[str, Any]] = {}
        self.node_pools: dict[str, dict[str, Any]] = {}
        self.scripts: dict[str, list[str]] = {}
        self.requests: list[tuple[str, str]] = []
        self.headers: list[dict[str, str]] = []
        self.bodies: list[Any] = []
        self.fail: dict[tuple[str, str], int] = {}
        self.html: set[tuple[str, str]] = set()
        self.next_script: list[str] = []
        self._ids = itertools.count(1)

    # ─── Test helpers ────────────────────────────────────────────────

    def script(self, resource_id: str, *steps: str) -> None:
        """States reported by the next GETs of resource_id, in order.

        A step is a status string, GONE (404 from then on) or DELETED
        (``deleted: true``). The last state sticks.
        """
        self.scripts[resource_id] = list(steps)

    def script_next(self, *steps: str) -> None:
        """Like ``script``, for the next resource created through the API."""
        self.next_script = list(steps)

    def _adopt_next_script(self, resource_id: str) -> None:
        if self.next_script:
            self.scripts[resource_id] = self.next_script
            self.next_script = []

    def add_cluster(self, status: str = "READY", node_count: int = 3) -> dict[str, Any]:
        n = next(self._ids)
        cluster = {
            "id": f"cluster-{n}",
            "name": f"dev-{n}",
            "cluster_id": "os-cluster",
            "project_id": "os-project",
            "keypair": "ops",
            "status": status,
            "phase": "Provisioned",
            "control_plane_name": f"cp-{n}",
            "control_plane_namespace": "strato",
            "tags": ["team:infra"],
            "last_error_id": "",
            "created_at": 1700000000,
            "updated_at": 1700000000,
            "deleted": False,
            "deleted_at": None,
        }
        self.clusters[cluster["id"]] = cluster
        self.add_node_pool(cluster["id"], status=status, node_count=node_count, is_default=True)
        return cluster

    def add_node_pool(
        self,
        cluster_id: str,
        *,
        name: str = "workers",
        status: str = "READY",
        node_count: int = 3,
        is_default: bool = False,
    ) -> dict[str, Any]:
        n = next(self._ids)
        pool = {
            "id": f"pool-{n}",
            "cluster_id": cluster_id,
            "name": f"np-{name}-{n}",
            "flavor_id": "m1.large",
            "network_id": "net-1",
            "keypair": "ops",
            "volume_size": 50,
            "node_count": node_count,
            "status": status,
            "server_group_id": f"sg-{n}",
            "is_default": is_default,
            "last_error_id": "",
            "created_at": 1700000000,
            "updated_at": 1700000000,
            "deleted": False,
            "deleted_at": None,
        }
        self.node_pools[pool["id"]] = pool
        return pool

    def default_pool(self, cluster_id: str) -> dict[str, Any]:
        return next(
            p for p in self.node_pools.values()
            if p["cluster_id"] == cluster_id and p["is_default"]
        )

    def calls(self, method: str, prefix: str = "") -> list[str]:
        return [path for m, path in self.requests if m == method and path.startswith(prefix)]

    # ─── Handlers ────────────────────────────────────────────────────

    def _advance(self, store: dict[str, dict[str, Any]], resource_id: str) -> dict[str, Any]:
        obj = store.get(resource_id)
        if obj is None:
            raise web.HTTPNotFound(text="not found")
        steps = self.scripts.get(resource_id)
        if steps:
            step = steps.pop(0) if len(steps) > 1 else steps[0]
            match step:
                case "<gone>":
                    del store[resource_id]
                    raise web.HTTPNotFound(text="not found")
                case "<deleted>":
                    obj["deleted"] = True
                    obj["deleted_at"] = 1700000999
                case status:
                    obj["status"] = status
        return obj

    @web.middleware
    async def middleware(self, request: web.Request, handler: Any) -> web.StreamResponse:
        self.requests.append((request.method, request.path))
        self.headers.append(dict(request.headers))
        self.bodies.append(await request.json() if request.can_read_body else None)
        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return web.Response(status=401, text="unauthorized")
        status = self.fail.get((request.method, request.path))
        if status is not None:
            return web.Response(status=status, text="injected failure")
        if (request.method, request.path) in self.html:
            return web.Response(text="<html>gateway</html>", content_type="text/html")
        return await handler(request)

    async def create_cluster(self, request: web.Request) -> web.Response:
        body = await request.json()
        cluster = self.add_cluster(status="IN_PROGRESS", node_count=body["node_count"])
        cluster["name"] = body["name"]
        cluster["tags"] = body.get("tags")
        cluster["cluster_id"] = request.headers.get("X-OS-Cluster-ID", "")
        cluster["project_id"] = request.headers.get("X-OS-Project-ID", "")
        self._adopt_next_script(cluster["id"])
        return web.json_response(cluster)

    async def get_cluster(self, request: web.Request) -> web.Response:
        return web.json_response(self._advance(self.clusters, request.match_info["id"]))

    async def update_cluster(self, request: web.Request) -> web.Response:
        cluster = self.clusters.get(request.match_info["id"])
        if cluster is None:
            raise web.HTTPNotFound(text="not found")
        body = await request.json()
        pool = self.default_pool(cluster["id"])
        if pool["node_count"] != body["node_count"]:
            pool["node_count"] = body["node_count"]
            pool["status"] = "RESIZING"
        return web.json_response(cluster)

    async def delete_cluster(self, request: web.Request) -> web.Response:
        cluster = self.clusters.get(request.match_info["id"])
        if cluster is None:
            raise web.HTTPNotFound(text="not found")
        cluster["status"] = "DELETING"
        return web.json_response(cluster)

    async def list_node_pools(self, request: web.Request) -> web.Response:
        cluster_id = request.match_info["id"]
        only_default = request.query.get("only_default") == "true"
        pools = [
            p for p in self.node_pools.values()
            if p["cluster_id"] == cluster_id and (p["is_default"] or not only_default)
        ]
        return web.json_response(pools)

    async def create_node_pool(self, request: web.Request) -> web.Response:
        cluster_id = request.match_info["id"]
        if cluster_id not in self.clusters:
            raise web.HTTPNotFound(text="not found")
        body = await request.json()
        pool = self.add_node_pool(
            cluster_id, name=body["name"], status="CREATING", node_count=body["node_count"],
        )
        self._adopt_next_script(pool["id"])
        return web.json_response(pool)

    def _pool(self, request: web.Request) -> dict[str, Any]:
        pool = self.node_pools.get(request.match_info["pool"])
        if pool is None or pool["cluster_id"] != request.match_info["id"]:
            raise web.HTTPNotFound(text="not found")
        return pool

    async def get_node_pool(self, request: web.Request) -> web.Response:
        self._pool(request)
        return web.json_response(self._advance(self.node_pools, request.match_info["pool"]))

    async def update_node_pool(self, request: web.Request) -> web.Response:
        pool = self._pool(request)
        body = await request.json()
        pool["node_count"] = body["node_count"]
        pool["status"] = "RESIZING"
        return web.json_response(pool)

    async def delete_node_pool(self, request: web.Request) -> web.Response:
        pool = self._pool(request)
        pool["status"] = "DELETING"
        return web.json_response(pool)

    def app(self) -> web.Application:
        app = web.Application(middlewares=[self.middleware])
        app.router.add_post("/strato/clusters", self.create_cluster)
        app.router.add_get("/strato/clusters/{id}", self.get_cluster)
        app.router.add_patch("/strato/clusters/{id}", self.update_cluster)
        app.router.add_delete("/strato/clusters/{id}", self.delete_cluster)
        app.router.add_get("/strato/clusters/{id}/nodepools", self.list_node_pools)
        app.router.add_post("/strato/clusters/{id}/nodepools", self.create_node_pool)
        app.router.add_get("/strato/clusters/{id}/nodepools/{pool}", self.get_node_pool)
        app.router.add_patch("/strato/clusters/{id}/nodepools/{pool}", self.update_node_pool)
        app.router.add_delete("/strato/clusters/{id}/nodepools/{pool}", self.delete_node_pool)
        return app


@pytest.fixture
def fake() -> FakeStrato:
    return FakeStrato()


@pytest.fixture
async def server(fake: FakeStrato) -> AsyncIterator[TestServer]:
    srv = TestServer(fake.app())
    await srv.start_server()
    yield srv
    await srv.close()


@pytest.fixture
def base_url(server: TestServer) -> str:
    return f"http://{server.host}:{server.port}/strato/"


@pytest.fixture
async def client(base_url: str) -> AsyncIterator[StratoClient]:
    async with StratoClient(TOKEN, base_url=base_url, timeout=5) as c:
        yield c
