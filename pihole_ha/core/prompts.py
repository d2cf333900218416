"""
Interactive parameter collection for pihole-ha.

A thin loop around the pure validators: each field is asked until its
validator accepts, and accepted fields are never asked again.
"""

from __future__ import annotations

import getpass

from typing import TYPE_CHECKING, Callable, TypeVar

import structlog

from pihole_ha.core.errors import ValidationError
from pihole_ha.core.model import (
    ClusterConfigModel,
    ClusterSharedConfig,
    HealthCheckPolicy,
    NodeConfig,
    NodeRole,
)
from pihole_ha.core.validation import (
    parse_floating_address,
    parse_group_id,
    parse_prefix_length,
    parse_priority,
    parse_role,
    parse_yes_no,
    validate_auth_secret,
    validate_interface,
)
from pihole_ha.network.interfaces import LOOPBACK_NAMES

if TYPE_CHECKING:
    from pihole_ha.config.settings import SetupSettings

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RULE = "=" * 60
THIN_RULE = "-" * 60


class ParameterCollector:
    """Asks the operator for every parameter of a ``ClusterConfigModel``."""

    def __init__(
        self,
        settings: SetupSettings,
        interfaces: Callable[[], list[str]],
        input_func: Callable[[str], str] = input,
        secret_func: Callable[[str], str] = getpass.getpass,
        output: Callable[[str], None] = print,
    ):
        """
        Initialize the collector.

        Args:
            settings: Supplies prompt defaults and the resolver unit
            interfaces: Returns the host's current interface names
            input_func: Reads one visible answer
            secret_func: Reads one answer without echo
            output: Writes one line for the operator
        """
        self.settings = settings
        self.defaults = settings.prompts
        self.interfaces = interfaces
        self.input = input_func
        self.secret = secret_func
        self.output = output

    def ask(self, prompt: str, parse: Callable[[str], T], default: str | None = None) -> T:
        """Ask until ``parse`` accepts; an empty answer selects ``default``."""
        while True:
            answer = self.input(prompt).strip()
            if not answer and default is not None:
                answer = default
            try:
                return parse(answer)
            except ValidationError as e:
                logger.debug("Input rejected", field=e.field)
                self.output(e.reason)

    def ask_yes_no(self, prompt: str, default: bool) -> bool:
        label = "yes" if default else "no"
        return self.ask(f"{prompt} [{label}]: ", lambda raw: parse_yes_no(raw, default))

    def ask_secret(self) -> str:
        while True:
            first = self.secret("Enter the authentication password for VRRP: ")
            confirmation = self.secret("Confirm authentication password: ")
            try:
                return validate_auth_secret(first, confirmation)
            except ValidationError as e:
                self.output(f"{e.reason} Please try again.")

    def collect_node(self) -> NodeConfig:
        role = self.ask(
            "Is this Pi the PRIMARY (MASTER) or BACKUP node? (Enter MASTER or BACKUP): ",
            parse_role,
        )

        available = self.interfaces()
        self.output("")
        self.output("Available network interfaces (excluding loopback 'lo'):")
        for name in available:
            if name not in LOOPBACK_NAMES:
                self.output(f"  - {name}")
        self.output(
            "Ensure you choose the interface connected to your main LAN where the VIP will reside."
        )
        interface = self.ask(
            "Enter the network interface name for keepalived (e.g., eth0, enp6s18): ",
            lambda raw: validate_interface(raw, available),
        )

        if role is NodeRole.PRIMARY:
            default_priority = self.defaults.primary_priority
        else:
            default_priority = self.defaults.secondary_priority
        priority = self.ask(
            f"Enter the priority for this node (numeric, e.g., {default_priority} for "
            f"{role.vrrp_state}) [Default: {default_priority}]: ",
            parse_priority,
            default=str(default_priority),
        )

        no_preempt = False
        if role is NodeRole.SECONDARY:
            self.output("")
            no_preempt = self.ask_yes_no(
                "Should this BACKUP node use 'nopreempt'? (If 'yes', it keeps the VIP once "
                "acquired, even if MASTER returns, until this BACKUP node itself fails.)",
                self.defaults.no_preempt,
            )

        return NodeConfig(role=role, interface=interface, priority=priority, no_preempt=no_preempt)

    def collect_shared(self) -> ClusterSharedConfig:
        self.output("")
        self.output("--- Common Settings (these MUST be identical on both Pi-hole HA nodes) ---")

        group_id = self.ask(
            "Enter the Virtual Router ID (numeric, 0-255, must be same on both nodes) "
            f"[Default: {self.defaults.group_id}]: ",
            parse_group_id,
            default=str(self.defaults.group_id),
        )

        self.output("")
        self.output("The VRRP authentication password MUST be identical on both HA nodes.")
        auth_secret = self.ask_secret()

        self.output("")
        self.output("The Virtual IP (VIP) is the IP address your clients will use as their DNS server.")
        self.output("It should be on the same subnet as your Pi-holes but not used by any other device.")
        floating_address = self.ask(
            "Enter the shared Virtual IP (VIP) address "
            f"(e.g., {self.defaults.floating_address_example}): ",
            parse_floating_address,
        )
        prefix_length = self.ask(
            "Enter the CIDR prefix for the VIP's subnet (e.g., 24 for a 255.255.255.0 subnet) "
            f"[Default: {self.defaults.prefix_length}]: ",
            parse_prefix_length,
            default=str(self.defaults.prefix_length),
        )

        return ClusterSharedConfig(
            group_id=group_id,
            auth_secret=auth_secret,
            floating_address=floating_address,
            prefix_length=prefix_length,
        )

    def collect_health(self) -> HealthCheckPolicy:
        self.output("")
        time_sync = self.ask_yes_no(
            f"Also require a synchronized clock ({self.settings.time_sync_tool}) "
            "for this node to be healthy?",
            self.defaults.time_sync_monitoring,
        )
        return HealthCheckPolicy(
            resolver_unit=self.settings.resolver_unit,
            time_sync_monitoring=time_sync,
            time_sync_tool=self.settings.time_sync_tool,
        )

    def collect(self) -> ClusterConfigModel:
        return ClusterConfigModel(
            node=self.collect_node(),
            shared=self.collect_shared(),
            health=self.collect_health(),
        )

    def show_summary(self, model: ClusterConfigModel, warnings: list[str]) -> None:
        node, shared = model.node, model.shared
        lines = [
            "",
            RULE,
            " Configuration Summary for this Pi:",
            THIN_RULE,
            f" Role:                {node.role.value} ({node.role.vrrp_state})",
            f" Interface:           {node.interface}",
            f" Priority:            {node.priority}",
        ]
        if node.role is NodeRole.SECONDARY:
            lines.append(f" Nopreempt:           {'yes' if node.no_preempt else 'no'}")
        lines.append(
            f" Time sync check:     {'yes' if model.health.time_sync_monitoring else 'no'}"
        )
        lines.extend([
            THIN_RULE,
            " Shared Settings (verify these are identical on both nodes):",
            f" Virtual IP (VIP):    {shared.floating_cidr}",
            f" Virtual Router ID:   {shared.group_id}",
            " Auth Password:       [set - not displayed]",
            RULE,
        ])
        for warning in warnings:
            lines.append(f"WARNING: {warning}")
        for line in lines:
            self.output(line)

    def confirm(self) -> bool:
        return self.ask_yes_no(
            "Proceed with this configuration and install/configure keepalived?", True
        )
