"""
Health check script synthesis for pihole-ha.

Builds the text of the bash probe keepalived runs through ``vrrp_script``.
The probe exits 0 only when every enabled condition holds, 1 otherwise.
Conditions run in order and the first failing one exits immediately.
"""

from __future__ import annotations

import shlex

from dataclasses import dataclass, field

from pihole_ha.core.model import HealthCheckPolicy

SHEBANG = "#!/bin/bash"
INDENT = "    "


@dataclass(frozen=True)
class HealthCondition:
    """One named condition made of shell tests that must all succeed."""

    description: str
    checks: tuple[str, ...] = field(default_factory=tuple)

    def render(self) -> list[str]:
        lines = [f"# {self.description}"]
        for check in self.checks:
            lines.extend([
                f"if ! {check}; then",
                f"{INDENT}exit 1",
                "fi",
            ])
        return lines


def resolver_condition(unit: str) -> HealthCondition:
    return HealthCondition(
        description=f"DNS resolver unit {unit} must be active",
        checks=(f"systemctl is-active --quiet {shlex.quote(unit)}",),
    )


def time_sync_condition(tool: str) -> HealthCondition:
    quoted = shlex.quote(tool)
    return HealthCondition(
        description=f"Clock must be synchronized ({tool} reports a normal leap status)",
        checks=(
            f"command -v {quoted} > /dev/null 2>&1",
            f"{quoted} tracking 2> /dev/null | grep -Eq '^Leap status[[:space:]]*:[[:space:]]*Normal'",
        ),
    )


class HealthCheckSynthesizer:
    """Generates the probe script for a ``HealthCheckPolicy``."""

    def conditions(self, policy: HealthCheckPolicy) -> list[HealthCondition]:
        """Enabled conditions, resolver first."""
        conditions = [resolver_condition(policy.resolver_unit)]
        if policy.time_sync_monitoring:
            conditions.append(time_sync_condition(policy.time_sync_tool))
        return conditions

    def synthesize(self, policy: HealthCheckPolicy) -> str:
        """Return the script text; same policy, same bytes."""
        lines = [
            SHEBANG,
            "# Health check for the Pi-hole failover pair, managed by pihole-ha.",
            "# Exits 0 if healthy, 1 if not.",
        ]

        for condition in self.conditions(policy):
            lines.append("")
            lines.extend(condition.render())

        lines.extend(["", "exit 0"])
        return "\n".join(lines) + "\n"
