"""Giving up on a slow wait.

Convergence waits can be stopped from outside by setting an asyncio.Event.
The remote change keeps going; only the local wait ends, with
OperationCancelledError.
"""

import asyncio
import sys

from strato import NodePoolResource, OperationCancelledError, StratoClient, load_settings


async def main(cluster_id: str, node_pool_id: str, node_count: int) -> None:
    settings = load_settings()
    cancel = asyncio.Event()

    async with StratoClient(settings.token, base_url=settings.url) as client:
        pools = NodePoolResource(client)
        resize = asyncio.create_task(
            pools.update(cluster_id, node_pool_id, node_count, cancel=cancel)
        )

        # Stop waiting after two minutes, whatever the pool is doing.
        asyncio.get_running_loop().call_later(120, cancel.set)

        try:
            pool = await resize
            print(f"{pool.id}: {pool.node_count} nodes, {pool.status}")
        except OperationCancelledError as e:
            print(f"stopped waiting: {e}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1], sys.argv[2], int(sys.argv[3])))
