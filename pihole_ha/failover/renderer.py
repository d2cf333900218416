"""
keepalived configuration rendering for pihole-ha.

The configuration is assembled as a tree of ``ConfigBlock`` and
``Directive`` objects and serialized in one pass, so optional lines are
either present as whole directives or absent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from pihole_ha.core.model import ClusterSharedConfig, NodeConfig

PROBE_NAME = "chk_pihole"
INSTANCE_NAME = "VI_PIHOLE"
PROBE_INTERVAL = 2
PROBE_WEIGHT = 2
PROBE_FALL = 2
PROBE_RISE = 2
ADVERT_INTERVAL = 1
INDENT = "    "


class Quoted(str):
    """A directive value written inside double quotes."""


@dataclass
class Directive:
    keyword: str
    values: tuple[str | int, ...] = ()

    def render(self) -> str:
        parts = [self.keyword]
        for value in self.values:
            parts.append(f'"{value}"' if isinstance(value, Quoted) else str(value))
        return " ".join(parts)


@dataclass
class ConfigBlock:
    """A ``keyword [name] { ... }`` block."""

    keyword: str
    name: str | None = None
    entries: list[Union[Directive, "ConfigBlock"]] = field(default_factory=list)

    def directive(self, keyword: str, *values: str | int) -> ConfigBlock:
        """Append a directive and return this block for chaining."""
        self.entries.append(Directive(keyword, values))
        return self

    def block(self, keyword: str, name: str | None = None) -> ConfigBlock:
        """Append a nested block and return it."""
        child = ConfigBlock(keyword, name)
        self.entries.append(child)
        return child

    def render(self, depth: int = 0) -> list[str]:
        pad = INDENT * depth
        header = self.keyword if self.name is None else f"{self.keyword} {self.name}"
        lines = [f"{pad}{header} {{"]
        for entry in self.entries:
            if isinstance(entry, ConfigBlock):
                lines.extend(entry.render(depth + 1))
            else:
                lines.append(f"{pad}{INDENT}{entry.render()}")
        lines.append(f"{pad}}}")
        return lines


@dataclass
class ConfigDocument:
    """Top-level comment header plus blocks."""

    header: list[str] = field(default_factory=list)
    blocks: list[ConfigBlock] = field(default_factory=list)

    def add(self, keyword: str, name: str | None = None) -> ConfigBlock:
        block = ConfigBlock(keyword, name)
        self.blocks.append(block)
        return block

    def render(self) -> str:
        lines = [f"# {line}" if line else "#" for line in self.header]
        for block in self.blocks:
            if lines:
                lines.append("")
            lines.extend(block.render())
        return "\n".join(lines) + "\n"


class FailoverConfigRenderer:
    """Renders the keepalived configuration for one node."""

    def __init__(self, script_user: str = "keepalived_script"):
        self.script_user = script_user

    def build(
        self,
        node: NodeConfig,
        shared: ClusterSharedConfig,
        health_check_path: Path | str,
    ) -> ConfigDocument:
        document = ConfigDocument(
            header=[
                "This file is managed by pihole-ha.",
                "Manual edits will be overwritten the next time setup runs.",
                f"Role: {node.role.value} ({node.role.vrrp_state})",
                f"Interface: {node.interface}",
            ]
        )

        document.add("global_defs") \
            .directive("enable_script_security") \
            .directive("script_user", self.script_user)

        document.add("vrrp_script", PROBE_NAME) \
            .directive("script", Quoted(str(health_check_path))) \
            .directive("interval", PROBE_INTERVAL) \
            .directive("weight", PROBE_WEIGHT) \
            .directive("fall", PROBE_FALL) \
            .directive("rise", PROBE_RISE)

        instance = document.add("vrrp_instance", INSTANCE_NAME)
        instance.directive("state", node.role.vrrp_state)
        instance.directive("interface", node.interface)
        instance.directive("virtual_router_id", shared.group_id)
        instance.directive("priority", node.priority)
        if node.preemption_suppressed:
            instance.directive("nopreempt")
        instance.directive("advert_int", ADVERT_INTERVAL)

        instance.block("authentication") \
            .directive("auth_type", "PASS") \
            .directive("auth_pass", Quoted(shared.auth_secret))
        instance.block("virtual_ipaddress").directive(shared.floating_cidr)
        instance.block("track_script").directive(PROBE_NAME)

        return document

    def render(
        self,
        node: NodeConfig,
        shared: ClusterSharedConfig,
        health_check_path: Path | str,
    ) -> str:
        """Return the configuration text; same inputs, same bytes."""
        return self.build(node, shared, health_check_path).render()
