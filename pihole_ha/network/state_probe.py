"""
Post-apply state inspection for pihole-ha.

Best effort and read-only: infers the node's VRRP role from the failover
daemon's recent journal and checks whether the floating address is bound to
the configured interface. An inconclusive answer is a valid outcome.
"""

from __future__ import annotations

import re

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

import structlog

from pihole_ha.network.interfaces import is_address_bound

if TYPE_CHECKING:
    from pihole_ha.orchestration.commands import CommandRunner

logger = structlog.get_logger(__name__)

_TRANSITION = re.compile(r"Entering (MASTER|BACKUP) STATE")


class ObservedRole(str, Enum):
    """Role inferred from the daemon's log."""

    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"
    INCONCLUSIVE = "INCONCLUSIVE"


def parse_transition_log(text: str) -> ObservedRole:
    """Return the role named by the last state transition in ``text``."""
    matches = _TRANSITION.findall(text)
    if not matches:
        return ObservedRole.INCONCLUSIVE
    return ObservedRole.PRIMARY if matches[-1] == "MASTER" else ObservedRole.SECONDARY


@dataclass
class ProbeReport:
    """What StateProbe could observe after the settle delay."""

    service: str
    interface: str
    floating_address: str
    service_active: bool = False
    role: ObservedRole = ObservedRole.INCONCLUSIVE
    address_bound: bool | None = None
    notes: list[str] = field(default_factory=list)

    def describe(self) -> str:
        """Human-readable status line."""
        if not self.service_active:
            return (
                f"WARNING: {self.service} is not reported as active after restart. "
                "Please investigate thoroughly!"
            )

        if self.role is ObservedRole.PRIMARY:
            text = "Likely in MASTER state (based on recent logs)."
        elif self.role is ObservedRole.SECONDARY:
            text = "Likely in BACKUP state (based on recent logs)."
        else:
            text = f"State unclear from recent logs; check 'journalctl -u {self.service}'."

        if self.address_bound is True:
            text += (
                f" VIP ({self.floating_address}) is currently bound to "
                f"{self.interface} on this node."
            )
        elif self.address_bound is False:
            text += (
                f" VIP ({self.floating_address}) is NOT currently bound to "
                f"{self.interface} on this node."
            )
        else:
            text += " VIP binding could not be determined."
        return text

    def verification_commands(self) -> list[str]:
        return [
            f"ip addr show {self.interface} | grep '{self.floating_address}'",
            f"journalctl -u {self.service} -f",
        ]


class StateProbe:
    """Inspects the failover daemon after it has been (re)started."""

    def __init__(
        self,
        runner: CommandRunner,
        service: str = "keepalived",
        log_lookback: str = "1 minute ago",
        address_check: Callable[[str, str], bool] = is_address_bound,
    ):
        self.runner = runner
        self.service = service
        self.log_lookback = log_lookback
        self.address_check = address_check

    async def probe(self, interface: str, floating_address: str) -> ProbeReport:
        """Collect what can be observed; never raises."""
        report = ProbeReport(
            service=self.service, interface=interface, floating_address=floating_address
        )

        try:
            active = await self.runner.run("systemctl", "is-active", "--quiet", self.service)
            report.service_active = active.ok
            if not report.service_active:
                logger.warning("Failover service not active after restart", service=self.service)
                return report

            journal = await self.runner.run(
                "journalctl",
                "-u",
                self.service,
                "--since",
                self.log_lookback,
                "-o",
                "cat",
                "--no-pager",
            )
            if journal.ok:
                report.role = parse_transition_log(journal.stdout)
            else:
                report.notes.append("journal could not be read")

        except Exception as e:
            logger.warning("State probe failed", error=f"{e.__class__.__name__}: {e}")
            report.notes.append(f"probe error: {e}")
            return report

        try:
            report.address_bound = self.address_check(interface, floating_address)
        except Exception as e:
            logger.warning("Address binding check failed", error=f"{e.__class__.__name__}: {e}")
            report.notes.append(f"address check error: {e}")

        logger.info(
            "State probe finished",
            role=report.role.value,
            address_bound=report.address_bound,
        )
        return report
