"""``strato`` command line.

    strato cluster create --name dev --os-cluster-id ... --node-count 3 ...
    strato cluster resize <id> --node-count 5
    strato nodepool delete <cluster-id> <id>

Mutations always wait for the resource to converge. Ctrl-C stops the wait
(the remote change keeps going) and exits with status 130.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys
from collections.abc import Sequence
from dataclasses import fields
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from strato.api.client import StratoClient
from strato.config import load_settings
from strato.convergence.budget import POLL_INTERVAL
from strato.core.exceptions import (
    ConvergenceTimeoutError,
    OperationCancelledError,
    StratoError,
)
from strato.observability.logging import LogConfig, setup_logging
from strato.resources import (
    ClusterDataSource,
    ClusterResource,
    ClusterSpec,
    NodePoolDataSource,
    NodePoolResource,
    NodePoolSpec,
)

EXIT_FAILED = 1
EXIT_TIMEOUT = 2
EXIT_CANCELLED = 130

console = Console()
err_console = Console(stderr=True)


def _render(obj: Any, title: str) -> Table:
    table = Table(title=title, show_header=False, title_justify="left")
    table.add_column("field", style="cyan")
    table.add_column("value")
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, tuple):
            value = ", ".join(value)
        table.add_row(f.name, "" if value is None else str(value))
    return table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="strato", description="Strato cluster management")
    parser.add_argument("--token", default=None, help="API token (default: STRATO_TOKEN)")
    parser.add_argument(
        "--log-level", default=None,
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log to stderr at this level",
    )
    kinds = parser.add_subparsers(dest="kind", required=True)

    cluster = kinds.add_parser("cluster", help="Manage clusters")
    cluster_ops = cluster.add_subparsers(dest="op", required=True)

    create = cluster_ops.add_parser("create", help="Create a cluster and wait until ready")
    create.add_argument("--name", required=True)
    create.add_argument("--os-cluster-id", required=True)
    create.add_argument("--os-project-id", required=True)
    create.add_argument("--keypair", required=True)
    create.add_argument("--network-id", required=True)
    create.add_argument("--flavor-id", required=True)
    create.add_argument("--volume-size", type=int, required=True)
    create.add_argument("--node-count", type=int, required=True)
    create.add_argument("--private-kube-api", action="store_true", default=None)
    create.add_argument("--tag", dest="tags", action="append", default=[])

    get = cluster_ops.add_parser("get", help="Show a cluster")
    get.add_argument("id")

    resize = cluster_ops.add_parser("resize", help="Resize the default node pool")
    resize.add_argument("id")
    resize.add_argument("--node-count", type=int, required=True)

    delete = cluster_ops.add_parser("delete", help="Delete a cluster and wait until gone")
    delete.add_argument("id")

    pool = kinds.add_parser("nodepool", help="Manage node pools")
    pool_ops = pool.add_subparsers(dest="op", required=True)

    create = pool_ops.add_parser("create", help="Create a node pool and wait until ready")
    create.add_argument("cluster_id")
    create.add_argument("--name", required=True)
    create.add_argument("--keypair", required=True)
    create.add_argument("--network-id", required=True)
    create.add_argument("--flavor-id", required=True)
    create.add_argument("--volume-size", type=int, required=True)
    create.add_argument("--node-count", type=int, required=True)

    for op, help_text in (("get", "Show a node pool"), ("delete", "Delete a node pool")):
        sub = pool_ops.add_parser(op, help=help_text)
        sub.add_argument("cluster_id")
        sub.add_argument("id")

    resize = pool_ops.add_parser("resize", help="Resize a node pool")
    resize.add_argument("cluster_id")
    resize.add_argument("id")
    resize.add_argument("--node-count", type=int, required=True)

    pool_ops.add_parser("list", help="List node pools").add_argument("cluster_id")

    return parser


async def run(
    args: argparse.Namespace,
    client: StratoClient,
    cancel: asyncio.Event,
    *,
    interval: float = POLL_INTERVAL,
) -> None:
    match args.kind, args.op:
        case "cluster", "create":
            spec = ClusterSpec(
                name=args.name,
                os_cluster_id=args.os_cluster_id,
                os_project_id=args.os_project_id,
                keypair=args.keypair,
                network_id=args.network_id,
                flavor_id=args.flavor_id,
                volume_size=args.volume_size,
                node_count=args.node_count,
                private_kube_api=args.private_kube_api,
                tags=tuple(args.tags),
            )
            cluster = await ClusterResource(client, interval=interval).create(spec, cancel=cancel)
            console.print(_render(cluster, f"cluster {cluster.id}"))
        case "cluster", "get":
            cluster = await ClusterDataSource(client).read(args.id)
            console.print(_render(cluster, f"cluster {cluster.id}"))
        case "cluster", "resize":
            cluster = await ClusterResource(client, interval=interval).update(
                args.id, args.node_count, cancel=cancel,
            )
            console.print(_render(cluster, f"cluster {cluster.id}"))
        case "cluster", "delete":
            await ClusterResource(client, interval=interval).delete(args.id, cancel=cancel)
            console.print(f"cluster {args.id} deleted")
        case "nodepool", "create":
            spec = NodePoolSpec(
                cluster_id=args.cluster_id,
                name=args.name,
                flavor_id=args.flavor_id,
                network_id=args.network_id,
                keypair=args.keypair,
                volume_size=args.volume_size,
                node_count=args.node_count,
            )
            pool = await NodePoolResource(client, interval=interval).create(spec, cancel=cancel)
            console.print(_render(pool, f"node pool {pool.id}"))
        case "nodepool", "get":
            pool = await NodePoolDataSource(client).read(args.cluster_id, args.id)
            console.print(_render(pool, f"node pool {pool.id}"))
        case "nodepool", "resize":
            pool = await NodePoolResource(client, interval=interval).update(
                args.cluster_id, args.id, args.node_count, cancel=cancel,
            )
            console.print(_render(pool, f"node pool {pool.id}"))
        case "nodepool", "delete":
            await NodePoolResource(client, interval=interval).delete(
                args.cluster_id, args.id, cancel=cancel,
            )
            console.print(f"node pool {args.id} deleted")
        case "nodepool", "list":
            pools = await NodePoolDataSource(client).list_node_pools(args.cluster_id)
            table = Table(title=f"node pools of {args.cluster_id}", title_justify="left")
            for column in ("id", "name", "nodes", "status", "default"):
                table.add_column(column)
            for p in pools:
                table.add_row(p.id, p.full_name, str(p.node_count), p.status, str(p.is_default))
            console.print(table)


def cancel_on_interrupt(loop: asyncio.AbstractEventLoop, cancel: asyncio.Event) -> None:
    """First Ctrl-C stops waiting; a second one interrupts whatever is running."""

    def on_interrupt() -> None:
        cancel.set()
        loop.remove_signal_handler(signal.SIGINT)

    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, on_interrupt)


async def _main(args: argparse.Namespace) -> None:
    settings = load_settings(token=args.token)
    cancel = asyncio.Event()
    cancel_on_interrupt(asyncio.get_running_loop(), cancel)

    client = StratoClient(settings.token, base_url=settings.url, timeout=settings.timeout)
    async with client:
        await run(args, client, cancel, interval=settings.poll_interval)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        setup_logging(LogConfig(level=args.log_level, console=True))

    try:
        asyncio.run(_main(args))
    except KeyboardInterrupt:
        err_console.print("[yellow]Interrupted[/yellow]")
        return EXIT_CANCELLED
    except OperationCancelledError as e:
        err_console.print(f"[yellow]{escape(str(e))}[/yellow]")
        return EXIT_CANCELLED
    except ConvergenceTimeoutError as e:
        err_console.print(f"[yellow]{escape(str(e))}[/yellow]")
        return EXIT_TIMEOUT
    except StratoError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        return EXIT_FAILED
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
