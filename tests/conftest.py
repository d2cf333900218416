"""Pytest configuration and fixtures for pihole-ha tests."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from pihole_ha.config.settings import SetupSettings
from pihole_ha.core.model import (
    ClusterConfigModel,
    ClusterSharedConfig,
    HealthCheckPolicy,
    NodeConfig,
    NodeRole,
)
from pihole_ha.orchestration.commands import CommandResult


class FakeRunner:
    """Scripted stand-in for ``CommandRunner``.

    Keeps a set of existing accounts so ``id``/``useradd`` behave like the
    real tools across repeated runs.
    """

    def __init__(
        self,
        failures: dict[tuple[str, ...], int] | None = None,
        journal: str = "",
        active: bool = True,
        users: set[str] | None = None,
    ) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.failures = dict(failures or {})
        self.journal = journal
        self.active = active
        self.users: set[str] = set(users or ())
        self.created: list[str] = []

    def called(self, *prefix: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[: len(prefix)] == prefix]

    async def run(self, *args: str, timeout: float | None = None) -> CommandResult:
        self.calls.append(args)

        for prefix, code in self.failures.items():
            if args[: len(prefix)] == prefix:
                return CommandResult(args, code, "", "simulated failure")

        if args[:2] == ("id", "-u"):
            return CommandResult(args, 0 if args[2] in self.users else 1, "", "")
        if args[0] == "useradd":
            if args[-1] in self.users:
                return CommandResult(args, 9, "", "user already exists")
            self.users.add(args[-1])
            self.created.append(args[-1])
        if args[:2] == ("systemctl", "is-active"):
            return CommandResult(args, 0 if self.active else 3, "", "")
        if args[0] == "journalctl":
            return CommandResult(args, 0, self.journal, "")
        return CommandResult(args, 0, "", "")


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_runner():
    """Factory for runners with scripted failures or journal output."""
    def _make(**kwargs: Any) -> FakeRunner:
        return FakeRunner(**kwargs)
    return _make


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def settings(tmp_path: Path) -> SetupSettings:
    """Settings pointing every artifact at a temporary directory."""
    (tmp_path / "bin").mkdir()
    (tmp_path / "keepalived").mkdir()
    return SetupSettings(
        health_check_path=tmp_path / "bin" / "pihole_check.sh",
        failover_config_path=tmp_path / "keepalived" / "keepalived.conf",
        settle_delay=3.0,
        require_root=False,
    )


@pytest.fixture
def shared_config() -> ClusterSharedConfig:
    return ClusterSharedConfig(
        group_id=51,
        auth_secret="s3cr3t",
        floating_address="192.168.0.5",
        prefix_length=24,
    )


@pytest.fixture
def primary_model(shared_config: ClusterSharedConfig) -> ClusterConfigModel:
    return ClusterConfigModel(
        node=NodeConfig(role=NodeRole.PRIMARY, interface="eth0", priority=101),
        shared=shared_config,
        health=HealthCheckPolicy(),
    )


@pytest.fixture
def secondary_model(shared_config: ClusterSharedConfig) -> ClusterConfigModel:
    return ClusterConfigModel(
        node=NodeConfig(
            role=NodeRole.SECONDARY, interface="eth0", priority=100, no_preempt=True
        ),
        shared=shared_config,
        health=HealthCheckPolicy(time_sync_monitoring=True),
    )


@pytest.fixture
def raw_inputs() -> dict[str, Any]:
    """Raw operator answers for a PRIMARY node."""
    return {
        "role": "master",
        "interface": "eth0",
        "priority": "101",
        "group_id": "51",
        "auth_secret": "s3cr3t",
        "auth_secret_confirm": "s3cr3t",
        "floating_address": "192.168.0.5",
        "prefix_length": "24",
        "time_sync_monitoring": False,
    }
