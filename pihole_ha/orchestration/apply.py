"""
Apply pipeline for pihole-ha.

Renders the artifacts for a validated ``ClusterConfigModel`` and then runs
the mutating phases strictly in order:

    install -> account -> health_check -> failover_config -> service -> state_probe

A ``SetupError`` from any phase stops the run; nothing is rolled back.
Every phase can be repeated with the same inputs and reaches the same end
state, so recovering from a failure means running the whole pipeline again.
"""

from __future__ import annotations

import asyncio
import os

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable

import structlog

from pihole_ha.core.errors import (
    AccountError,
    DependencyError,
    ServiceError,
    SetupError,
    WriteError,
)
from pihole_ha.core.model import RenderedArtifacts
from pihole_ha.failover.healthcheck import HealthCheckSynthesizer
from pihole_ha.failover.renderer import FailoverConfigRenderer
from pihole_ha.network.state_probe import StateProbe
from pihole_ha.orchestration.commands import CommandRunner

if TYPE_CHECKING:
    from pihole_ha.config.settings import SetupSettings
    from pihole_ha.core.model import ClusterConfigModel
    from pihole_ha.network.state_probe import ProbeReport

logger = structlog.get_logger(__name__)

# useradd exit status for "username already in use"
USERADD_NAME_IN_USE = 9


class ApplyPhase(str, Enum):
    """Apply phases, in execution order."""

    INSTALL = "install"
    ACCOUNT = "account"
    HEALTH_CHECK = "health_check"
    FAILOVER_CONFIG = "failover_config"
    SERVICE = "service"
    STATE_PROBE = "state_probe"


class PhaseStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FATAL = "fatal"


@dataclass
class PhaseOutcome:
    phase: ApplyPhase
    status: PhaseStatus
    detail: str = ""


@dataclass
class ApplyReport:
    """Result of one apply run."""

    artifacts: RenderedArtifacts
    outcomes: list[PhaseOutcome] = field(default_factory=list)
    failure: SetupError | None = None
    probe: ProbeReport | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def outcome(self, phase: ApplyPhase) -> PhaseOutcome | None:
        for outcome in self.outcomes:
            if outcome.phase is phase:
                return outcome
        return None


def render_artifacts(model: ClusterConfigModel, settings: SetupSettings) -> RenderedArtifacts:
    """Render both artifacts; the config references the exact probe path written."""
    script_path = settings.health_check_path
    return RenderedArtifacts(
        health_check_script_text=HealthCheckSynthesizer().synthesize(model.health),
        health_check_script_path=script_path,
        failover_config_text=FailoverConfigRenderer(settings.script_user).render(
            model.node, model.shared, script_path
        ),
        failover_config_path=settings.failover_config_path,
    )


def write_artifact(path: Path, text: str, mode: int, phase: ApplyPhase) -> None:
    """Write ``text`` to ``path`` and force ``mode``, replacing any old content.

    The file is created with ``mode`` already applied so the content is never
    readable with looser permissions. The parent directory must exist.
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            os.fchmod(f.fileno(), mode)
            f.write(text)
    except OSError as e:
        raise WriteError(
            f"Failed to create {path}: {e.strerror or e}",
            phase=phase.value,
            hint=f"ls -ld {path.parent}",
        ) from e


class ApplyOrchestrator:
    """Runs the apply phases for one node."""

    def __init__(
        self,
        settings: SetupSettings,
        runner: CommandRunner | None = None,
        state_probe: StateProbe | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the orchestrator.

        Args:
            settings: Host-level settings (paths, unit and package names)
            runner: Executes external commands
            state_probe: Post-apply inspection (built from ``runner`` if None)
            sleep: Awaitable used for the settle delay
        """
        self.settings = settings
        self.runner = runner or CommandRunner(timeout=settings.command_timeout)
        self.state_probe = state_probe or StateProbe(
            self.runner,
            service=settings.failover_service,
            log_lookback=settings.log_lookback,
        )
        self.sleep = sleep

    async def apply(self, model: ClusterConfigModel) -> ApplyReport:
        """Render and apply ``model``; stops at the first fatal phase."""
        artifacts = render_artifacts(model, self.settings)
        report = ApplyReport(artifacts=artifacts)

        phases: list[tuple[ApplyPhase, Callable[[], Awaitable[PhaseOutcome]]]] = [
            (ApplyPhase.INSTALL, lambda: self.install_packages(model)),
            (ApplyPhase.ACCOUNT, self.ensure_account),
            (ApplyPhase.HEALTH_CHECK, lambda: self.write_health_check(artifacts)),
            (ApplyPhase.FAILOVER_CONFIG, lambda: self.write_failover_config(artifacts)),
            (ApplyPhase.SERVICE, self.restart_service),
        ]

        for phase, step in phases:
            logger.info("Phase started", phase=phase.value)
            try:
                outcome = await step()
            except SetupError as e:
                logger.error("Phase failed", phase=e.phase, error=e.message, hint=e.hint)
                report.outcomes.append(PhaseOutcome(phase, PhaseStatus.FATAL, e.message))
                report.failure = e
                return report

            logger.info("Phase finished", phase=phase.value, status=outcome.status.value)
            report.outcomes.append(outcome)

        report.probe = await self.verify_state(model)
        report.outcomes.append(
            PhaseOutcome(ApplyPhase.STATE_PROBE, PhaseStatus.SUCCESS, report.probe.describe())
        )
        return report

    async def install_packages(self, model: ClusterConfigModel) -> PhaseOutcome:
        packages = [self.settings.failover_package]
        if model.health.time_sync_monitoring and self.settings.install_time_sync:
            packages.append(self.settings.time_sync_package)

        update = await self.runner.run("apt-get", "update")
        if not update.ok:
            logger.warning(
                "Package list update failed, continuing with cached lists",
                returncode=update.returncode,
            )

        result = await self.runner.run("apt-get", "install", "-y", *packages)
        if not result.ok:
            raise DependencyError(
                f"Failed to install {', '.join(packages)} (exit status {result.returncode})",
                phase=ApplyPhase.INSTALL.value,
                hint=f"apt-get install -y {' '.join(packages)}",
            )
        return PhaseOutcome(
            ApplyPhase.INSTALL, PhaseStatus.SUCCESS, f"installed {', '.join(packages)}"
        )

    async def ensure_account(self) -> PhaseOutcome:
        """Create the low-privilege account the probe runs as, if missing."""
        user = self.settings.script_user

        existing = await self.runner.run("id", "-u", user)
        if existing.ok:
            logger.info("Health check account already present", user=user)
            return PhaseOutcome(ApplyPhase.ACCOUNT, PhaseStatus.SKIPPED, f"{user} already exists")

        result = await self.runner.run(
            "useradd", "--system", "--no-create-home", "--shell", "/usr/sbin/nologin", user
        )
        if result.returncode == USERADD_NAME_IN_USE:
            return PhaseOutcome(ApplyPhase.ACCOUNT, PhaseStatus.SKIPPED, f"{user} already exists")
        if not result.ok:
            raise AccountError(
                f"Failed to create account {user} (exit status {result.returncode})",
                phase=ApplyPhase.ACCOUNT.value,
                hint=f"id {user}",
            )

        logger.info("Health check account created", user=user)
        return PhaseOutcome(ApplyPhase.ACCOUNT, PhaseStatus.SUCCESS, f"created {user}")

    async def write_health_check(self, artifacts: RenderedArtifacts) -> PhaseOutcome:
        write_artifact(
            artifacts.health_check_script_path,
            artifacts.health_check_script_text,
            artifacts.health_check_script_mode,
            ApplyPhase.HEALTH_CHECK,
        )
        return PhaseOutcome(
            ApplyPhase.HEALTH_CHECK,
            PhaseStatus.SUCCESS,
            f"wrote {artifacts.health_check_script_path}",
        )

    async def write_failover_config(self, artifacts: RenderedArtifacts) -> PhaseOutcome:
        write_artifact(
            artifacts.failover_config_path,
            artifacts.failover_config_text,
            artifacts.failover_config_mode,
            ApplyPhase.FAILOVER_CONFIG,
        )
        return PhaseOutcome(
            ApplyPhase.FAILOVER_CONFIG,
            PhaseStatus.SUCCESS,
            f"wrote {artifacts.failover_config_path}",
        )

    async def restart_service(self) -> PhaseOutcome:
        service = self.settings.failover_service

        enable = await self.runner.run("systemctl", "enable", service)
        if not enable.ok:
            logger.warning("Could not enable service on boot", service=service)

        result = await self.runner.run("systemctl", "restart", service)
        if not result.ok:
            raise ServiceError(
                f"Failed to restart {service} service (exit status {result.returncode})",
                phase=ApplyPhase.SERVICE.value,
                hint=f"systemctl status {service} --no-pager; journalctl -u {service}",
            )
        return PhaseOutcome(ApplyPhase.SERVICE, PhaseStatus.SUCCESS, f"{service} restarted")

    async def verify_state(self, model: ClusterConfigModel) -> ProbeReport:
        """Wait for the daemon to settle, then inspect it (diagnostic only)."""
        await self.sleep(self.settings.settle_delay)
        return await self.state_probe.probe(
            model.node.interface, model.shared.floating_address
        )
