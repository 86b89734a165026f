"""Cluster lifecycle.

Creates a cluster, grows its default node pool, then deletes it. Every
call returns only once the API reports the change as settled:

    create  ── IN_PROGRESS ... READY
    resize  ── default pool RESIZING ... READY
    delete  ── DELETING ... gone

Needs STRATO_TOKEN (or a strato.toml) and real OpenStack ids.
"""

import asyncio
import os

from strato import (
    ClusterResource,
    ClusterSpec,
    LogConfig,
    StratoClient,
    load_settings,
    setup_logging,
)


async def main() -> None:
    settings = load_settings()
    setup_logging(LogConfig(level="INFO"))

    async with StratoClient(settings.token, base_url=settings.url) as client:
        clusters = ClusterResource(client, interval=settings.poll_interval)

        cluster = await clusters.create(ClusterSpec(
            name="example",
            os_cluster_id=os.environ["OS_CLUSTER_ID"],
            os_project_id=os.environ["OS_PROJECT_ID"],
            keypair=os.environ.get("OS_KEYPAIR", "default"),
            network_id=os.environ["OS_NETWORK_ID"],
            flavor_id=os.environ["OS_FLAVOR_ID"],
            volume_size=50,
            node_count=2,
            tags=("example",),
        ))
        print(f"{cluster.id} is {cluster.status}")

        cluster = await clusters.update(cluster.id, node_count=4)
        pool = await clusters.default_node_pool(cluster.id)
        print(f"default pool {pool.full_name} has {pool.node_count} nodes")

        await clusters.delete(cluster.id)
        print("deleted")


if __name__ == "__main__":
    asyncio.run(main())
