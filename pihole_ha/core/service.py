"""
Main pihole-ha setup flow

Collects this node's parameters, asks for confirmation, applies the
configuration and reports the result. Exit status is 0 only when every
mutating phase succeeded.
"""
from __future__ import annotations

import asyncio
import os
import sys

from typing import TYPE_CHECKING, Callable

import structlog

from pihole_ha.config.logging import configure_logging
from pihole_ha.config.settings import load_settings
from pihole_ha.core.model import advisory_warnings
from pihole_ha.core.prompts import RULE, ParameterCollector
from pihole_ha.network.interfaces import list_interfaces
from pihole_ha.orchestration.apply import ApplyOrchestrator

if TYPE_CHECKING:
    from pihole_ha.config.settings import SetupSettings
    from pihole_ha.core.model import ClusterConfigModel
    from pihole_ha.orchestration.apply import ApplyReport

logger = structlog.get_logger(__name__)

ABORT_MESSAGE = "Setup aborted by user. No changes were made."


def print_banner(output: Callable[[str], None] = print) -> None:
    output(RULE)
    output(" Pi-hole HA (keepalived) Interactive Setup")
    output(RULE)
    output("This will guide you through configuring keepalived for THIS Pi.")
    output("Run it on both your primary and backup Pi-hole nodes.")
    output("")


def print_result(
    report: ApplyReport,
    model: ClusterConfigModel,
    output: Callable[[str], None] = print,
) -> None:
    """Print the outcome of an apply run and the follow-up steps."""
    if report.failure is not None:
        output(report.failure.describe())
        return

    output("")
    for outcome in report.outcomes:
        output(f"SUCCESS [{outcome.phase.value}]: {outcome.detail}")

    if report.probe is not None:
        output("")
        output(f"Keepalived operational status: {report.probe.describe()}")
        for note in report.probe.notes:
            output(f"  Note: {note}")
        output("To verify VIP presence on this node, run:")
        output(f"  {report.probe.verification_commands()[0]}")
        output("To monitor keepalived logs in real-time, run:")
        output(f"  {report.probe.verification_commands()[1]}")

    address = model.shared.floating_address
    output("")
    output(RULE)
    output(" Setup finished for this node!")
    output(RULE)
    output(" IMPORTANT NEXT STEPS:")
    output(" 1. Run this setup on your OTHER Pi-hole HA node with the same shared")
    output("    settings (Virtual Router ID, password, VIP) to complete the pair.")
    output(" 2. Configure your DHCP server to hand out the Virtual IP address")
    output(f"    ({address}) as the ONLY DNS server for your clients.")
    output(" 3. Synchronize Pi-hole settings (adlists, blocklists, allowlists)")
    output("    between the two nodes separately; this setup does not do it.")
    output(RULE)


class SetupService:
    """Interactive setup for one node of the failover pair."""

    def __init__(
        self,
        settings: SetupSettings | None = None,
        collector: ParameterCollector | None = None,
        orchestrator: ApplyOrchestrator | None = None,
        output: Callable[[str], None] = print,
    ):
        self.settings = settings or load_settings()
        self.collector = collector or ParameterCollector(
            self.settings, interfaces=list_interfaces, output=output
        )
        self.orchestrator = orchestrator or ApplyOrchestrator(self.settings)
        self.output = output

    def check_privileges(self) -> bool:
        if not self.settings.require_root:
            return True
        if os.geteuid() != 0:
            self.output(
                "ERROR: This setup must be run as root. Please use 'sudo' when executing."
            )
            return False
        return True

    def prepare(self) -> ClusterConfigModel | None:
        """Collect and confirm this node's parameters.

        Returns None when setup must stop before anything is changed.
        """
        if not self.check_privileges():
            return None

        print_banner(self.output)

        try:
            model = self.collector.collect()
            self.collector.show_summary(model, advisory_warnings(model))
            confirmed = self.collector.confirm()
        except (EOFError, KeyboardInterrupt):
            self.output("")
            self.output(ABORT_MESSAGE)
            return None

        if not confirmed:
            self.output(ABORT_MESSAGE)
            return None
        return model

    async def execute(self, model: ClusterConfigModel) -> int:
        """Apply a confirmed model and report; returns the exit status."""
        logger.info(
            "Applying configuration",
            role=model.node.role.value,
            interface=model.node.interface,
            group_id=model.shared.group_id,
        )
        report = await self.orchestrator.apply(model)
        print_result(report, model, self.output)
        return report.exit_code

    def run(self) -> int:
        """Run the whole setup; returns the process exit status.

        Prompting happens before the event loop starts; only the apply
        phases run inside it.
        """
        model = self.prepare()
        if model is None:
            return 1
        return asyncio.run(self.execute(model))


def main() -> int:
    """Main entry point for pihole-ha."""
    settings = load_settings()
    configure_logging(
        log_level=settings.logging.level,
        json_logs=settings.logging.json_format,
    )
    return SetupService(settings).run()


def run() -> None:
    """Console script wrapper."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nSetup interrupted by user")
        sys.exit(1)
