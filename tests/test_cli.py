from __future__ import annotations

import argparse
import asyncio
import signal
from pathlib import Path

import pytest

import strato.cli as cli_module
import strato.config as config_module
from strato.api.client import StratoClient
from strato.cli import (
    EXIT_CANCELLED,
    EXIT_FAILED,
    EXIT_TIMEOUT,
    build_parser,
    cancel_on_interrupt,
    main,
    run,
)
from strato.core.exceptions import (
    ConvergenceError,
    ConvergenceTimeoutError,
    OperationCancelledError,
)

from tests.conftest import GONE, FakeStrato

pytestmark = [pytest.mark.unit, pytest.mark.timeout(30)]


class TestParser:
    def test_cluster_create(self):
        args = build_parser().parse_args([
            "cluster", "create",
            "--name", "dev",
            "--os-cluster-id", "c", "--os-project-id", "p",
            "--keypair", "ops", "--network-id", "n", "--flavor-id", "f",
            "--volume-size", "50", "--node-count", "3",
            "--tag", "a", "--tag", "b",
        ])
        assert (args.kind, args.op) == ("cluster", "create")
        assert args.node_count == 3
        assert args.tags == ["a", "b"]
        assert args.private_kube_api is None

    def test_nodepool_resize(self):
        args = build_parser().parse_args(["nodepool", "resize", "c1", "p1", "--node-count", "7"])
        assert (args.cluster_id, args.id, args.node_count) == ("c1", "p1", 7)

    def test_kind_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_resize_needs_node_count(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["cluster", "resize", "c1"])


def parse(*argv: str) -> argparse.Namespace:
    return build_parser().parse_args(list(argv))


class TestRun:
    @pytest.mark.asyncio
    async def test_cluster_get(self, client: StratoClient, fake: FakeStrato, capsys):
        cluster = fake.add_cluster()
        await run(parse("cluster", "get", cluster["id"]), client, asyncio.Event())
        out = capsys.readouterr().out
        assert cluster["id"] in out
        assert "READY" in out

    @pytest.mark.asyncio
    async def test_cluster_resize_waits(self, client: StratoClient, fake: FakeStrato, capsys):
        cluster = fake.add_cluster(node_count=2)
        fake.script(fake.default_pool(cluster["id"])["id"], "RESIZING", "READY")
        await run(
            parse("cluster", "resize", cluster["id"], "--node-count", "3"),
            client, asyncio.Event(), interval=0,
        )
        assert fake.default_pool(cluster["id"])["node_count"] == 3

    @pytest.mark.asyncio
    async def test_nodepool_delete(self, client: StratoClient, fake: FakeStrato, capsys):
        cluster = fake.add_cluster()
        pool = fake.add_node_pool(cluster["id"])
        fake.script(pool["id"], GONE)
        await run(
            parse("nodepool", "delete", cluster["id"], pool["id"]),
            client, asyncio.Event(), interval=0,
        )
        assert f"node pool {pool['id']} deleted" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_nodepool_list(self, client: StratoClient, fake: FakeStrato, capsys):
        cluster = fake.add_cluster()
        fake.add_node_pool(cluster["id"], name="extra")
        await run(parse("nodepool", "list", cluster["id"]), client, asyncio.Event())
        out = capsys.readouterr().out
        assert "np-extra-" in out

    @pytest.mark.asyncio
    async def test_failure_propagates(self, client: StratoClient, fake: FakeStrato):
        cluster = fake.add_cluster()
        pool = fake.add_node_pool(cluster["id"])
        fake.script(pool["id"], "ERROR")
        with pytest.raises(ConvergenceError):
            await run(
                parse("nodepool", "resize", cluster["id"], pool["id"], "--node-count", "2"),
                client, asyncio.Event(), interval=0,
            )


class TestMainExitCodes:
    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_module, "GLOBAL_CONFIG_PATH", tmp_path / "none.toml")
        monkeypatch.delenv("STRATO_TOKEN", raising=False)
        monkeypatch.delenv("STRATO_API_URL", raising=False)

    def test_missing_token(self, capsys):
        assert main(["cluster", "get", "c1"]) == EXIT_FAILED
        assert "No API token configured" in capsys.readouterr().err

    def test_unreachable_api(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STRATO_TOKEN", "t")
        monkeypatch.setenv("STRATO_API_URL", "http://127.0.0.1:1/strato/")
        assert main(["cluster", "get", "c1"]) == EXIT_FAILED

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (OperationCancelledError("delete cluster", 3), EXIT_CANCELLED),
            (ConvergenceTimeoutError("delete cluster", 60, "DELETING"), EXIT_TIMEOUT),
            (ConvergenceError("delete cluster", "cluster is in error state"), EXIT_FAILED),
        ],
    )
    def test_outcome_exit_codes(self, monkeypatch: pytest.MonkeyPatch, error, code):
        async def fail(_args):
            raise error

        monkeypatch.setattr(cli_module, "_main", fail)
        assert main(["cluster", "delete", "c1"]) == code

    def test_success(self, monkeypatch: pytest.MonkeyPatch):
        async def ok(_args):
            return None

        monkeypatch.setattr(cli_module, "_main", ok)
        assert main(["cluster", "get", "c1"]) == 0

    def test_keyboard_interrupt_is_cancelled(self, monkeypatch: pytest.MonkeyPatch):
        async def interrupted(_args):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli_module, "_main", interrupted)
        assert main(["cluster", "delete", "c1"]) == EXIT_CANCELLED


class RecordingLoop:
    def __init__(self) -> None:
        self.handlers: dict[int, object] = {}
        self.removed: list[int] = []

    def add_signal_handler(self, sig: int, callback) -> None:
        self.handlers[sig] = callback

    def remove_signal_handler(self, sig: int) -> bool:
        self.removed.append(sig)
        return self.handlers.pop(sig, None) is not None


class TestInterrupt:
    def test_first_interrupt_cancels_and_uninstalls(self):
        loop, cancel = RecordingLoop(), asyncio.Event()
        cancel_on_interrupt(loop, cancel)

        loop.handlers[signal.SIGINT]()

        assert cancel.is_set()
        assert loop.removed == [signal.SIGINT]
        assert signal.SIGINT not in loop.handlers

    def test_platform_without_signal_handlers(self):
        class NoSignals(RecordingLoop):
            def add_signal_handler(self, sig: int, callback) -> None:
                raise NotImplementedError

        cancel = asyncio.Event()
        cancel_on_interrupt(NoSignals(), cancel)
        assert not cancel.is_set()
