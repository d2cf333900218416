"""
Cluster configuration model for pihole-ha.

Holds one node's role-specific parameters and the parameters shared by the
whole failover group. Instances are built fresh for every run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# keepalived PASS authentication only uses this many characters
AUTH_PASS_SIGNIFICANT_LENGTH = 8
MAX_VRRP_PRIORITY = 255
DEFAULT_PRIMARY_PRIORITY = 101
DEFAULT_SECONDARY_PRIORITY = 100


class NodeRole(str, Enum):
    """Role of this node in the failover pair."""

    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"

    @property
    def vrrp_state(self) -> str:
        """Initial state keyword understood by keepalived."""
        return "MASTER" if self is NodeRole.PRIMARY else "BACKUP"

    @property
    def default_priority(self) -> int:
        if self is NodeRole.PRIMARY:
            return DEFAULT_PRIMARY_PRIORITY
        return DEFAULT_SECONDARY_PRIORITY


@dataclass(frozen=True)
class NodeConfig:
    """Per-node parameters, never shared with the peer."""

    role: NodeRole
    interface: str
    priority: int
    no_preempt: bool = False

    @property
    def preemption_suppressed(self) -> bool:
        """``nopreempt`` only applies to the SECONDARY node."""
        return self.role is NodeRole.SECONDARY and self.no_preempt


@dataclass(frozen=True)
class ClusterSharedConfig:
    """Parameters that must be identical on both nodes of the group.

    Nothing here can detect a mismatch with the peer: two nodes with
    different ``group_id`` values silently form two separate groups.
    """

    group_id: int
    auth_secret: str
    floating_address: str
    prefix_length: int

    @property
    def floating_cidr(self) -> str:
        return f"{self.floating_address}/{self.prefix_length}"

    def __repr__(self) -> str:
        return (
            f"ClusterSharedConfig(group_id={self.group_id}, auth_secret='***', "
            f"floating_address={self.floating_address!r}, "
            f"prefix_length={self.prefix_length})"
        )


@dataclass(frozen=True)
class HealthCheckPolicy:
    """Conditions the health check script enforces, combined with AND."""

    resolver_unit: str = "pihole-FTL.service"
    time_sync_monitoring: bool = False
    time_sync_tool: str = "chronyc"


@dataclass(frozen=True)
class ClusterConfigModel:
    """Everything needed to render this node's artifacts."""

    node: NodeConfig
    shared: ClusterSharedConfig
    health: HealthCheckPolicy


@dataclass(frozen=True)
class RenderedArtifacts:
    """Rendered file contents and where they go."""

    health_check_script_text: str
    health_check_script_path: Path
    failover_config_text: str
    failover_config_path: Path

    health_check_script_mode: int = 0o755
    failover_config_mode: int = 0o600


def advisory_warnings(model: ClusterConfigModel) -> list[str]:
    """Return non-blocking warnings about unusual but accepted values."""
    warnings: list[str] = []
    node = model.node

    if node.role is NodeRole.PRIMARY and node.priority <= DEFAULT_SECONDARY_PRIORITY:
        warnings.append(
            f"PRIMARY priority {node.priority} is not above the usual SECONDARY "
            f"priority ({DEFAULT_SECONDARY_PRIORITY}); the peer may win elections."
        )
    elif node.role is NodeRole.SECONDARY and node.priority >= DEFAULT_PRIMARY_PRIORITY:
        warnings.append(
            f"SECONDARY priority {node.priority} is not below the usual PRIMARY "
            f"priority ({DEFAULT_PRIMARY_PRIORITY}); this node may take over."
        )

    if node.priority > MAX_VRRP_PRIORITY:
        warnings.append(
            f"Priority {node.priority} exceeds {MAX_VRRP_PRIORITY}; "
            "keepalived will reject or clamp it."
        )

    if len(model.shared.auth_secret) > AUTH_PASS_SIGNIFICANT_LENGTH:
        warnings.append(
            f"Only the first {AUTH_PASS_SIGNIFICANT_LENGTH} characters of the "
            "authentication password are used by keepalived."
        )

    return warnings
