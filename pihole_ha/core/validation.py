"""
Parameter validation for pihole-ha.

Every function here is pure: it takes one raw value (plus whatever context
it needs, passed in explicitly) and returns a typed value or raises
``ValidationError``. Prompting and retrying live in ``pihole_ha.core.prompts``.
"""

from __future__ import annotations

import re

from typing import Any, Iterable, Mapping

from pihole_ha.core.errors import ValidationError
from pihole_ha.core.model import (
    ClusterConfigModel,
    ClusterSharedConfig,
    HealthCheckPolicy,
    NodeConfig,
    NodeRole,
)

# Bounded so int() never sees a string past the interpreter's digit limit
_UNSIGNED_INT = re.compile(r"^[0-9]{1,10}$")
# Octet ranges are intentionally not checked.
_DOTTED_QUAD = re.compile(r"^[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}$")
_UNQUOTABLE = re.compile(r'["\x00-\x1f\x7f]')

_ROLE_ALIASES: dict[str, NodeRole] = {
    "MASTER": NodeRole.PRIMARY,
    "PRIMARY": NodeRole.PRIMARY,
    "BACKUP": NodeRole.SECONDARY,
    "SECONDARY": NodeRole.SECONDARY,
}

_YES = {"yes", "y"}
_NO = {"no", "n"}


def _text(raw: Any) -> str:
    return "" if raw is None else str(raw).strip()


def _unsigned(field: str, raw: Any, reason: str) -> int:
    value = _text(raw)
    if not _UNSIGNED_INT.match(value):
        raise ValidationError(field, reason)
    return int(value)


def parse_role(raw: Any) -> NodeRole:
    """Accept MASTER/PRIMARY or BACKUP/SECONDARY in any case."""
    role = _ROLE_ALIASES.get(_text(raw).upper())
    if role is None:
        raise ValidationError("role", "Please enter 'MASTER' or 'BACKUP'.")
    return role


def validate_interface(raw: Any, available: Iterable[str]) -> str:
    """Check that the interface name exists on this host.

    Args:
        raw: Interface name as entered
        available: Names of the currently enumerable interfaces
    """
    name = _text(raw)
    if not name:
        raise ValidationError("interface", "Interface name cannot be empty.")
    if name not in set(available):
        raise ValidationError(
            "interface",
            f"Interface '{name}' does not appear to exist. Please verify the name.",
        )
    return name


def parse_priority(raw: Any) -> int:
    return _unsigned("priority", raw, "Priority must be a positive number.")


def parse_group_id(raw: Any) -> int:
    group_id = _unsigned("group_id", raw, "Must be a number between 0 and 255.")
    if group_id > 255:
        raise ValidationError("group_id", "Must be a number between 0 and 255.")
    return group_id


def validate_auth_secret(secret: Any, confirmation: Any) -> str:
    """Check a double-entered shared secret.

    The secret is kept verbatim (no stripping); it ends up inside a quoted
    keepalived string, so quotes and control characters are refused.
    """
    secret = "" if secret is None else str(secret)
    confirmation = "" if confirmation is None else str(confirmation)

    if not secret:
        raise ValidationError("auth_secret", "Password cannot be empty.")
    if secret != confirmation:
        raise ValidationError("auth_secret", "Passwords do not match.")
    if _UNQUOTABLE.search(secret):
        raise ValidationError(
            "auth_secret", "Password cannot contain double quotes or control characters."
        )
    return secret


def parse_floating_address(raw: Any) -> str:
    address = _text(raw)
    if not _DOTTED_QUAD.match(address):
        raise ValidationError(
            "floating_address",
            "Invalid IP address format. Please use format X.X.X.X (e.g., 192.168.1.100).",
        )
    return address


def parse_prefix_length(raw: Any) -> int:
    reason = "Invalid CIDR prefix. Must be a number between 1 and 32."
    prefix = _unsigned("prefix_length", raw, reason)
    if not 1 <= prefix <= 32:
        raise ValidationError("prefix_length", reason)
    return prefix


def parse_yes_no(raw: Any, default: bool | None = None, field: str = "answer") -> bool:
    """Interpret yes/y/no/n; an empty answer selects ``default`` when given."""
    answer = _text(raw).lower()
    if not answer and default is not None:
        return default
    if answer in _YES:
        return True
    if answer in _NO:
        return False
    raise ValidationError(field, "Invalid input. Please enter 'yes' or 'no'.")


def build_model(
    raw: Mapping[str, Any],
    available_interfaces: Iterable[str],
    resolver_unit: str = "pihole-FTL.service",
    time_sync_tool: str = "chronyc",
) -> ClusterConfigModel:
    """Validate a complete set of raw inputs without any prompting.

    ``raw`` uses the keys ``role``, ``interface``, ``priority``,
    ``no_preempt``, ``group_id``, ``auth_secret``, ``auth_secret_confirm``,
    ``floating_address``, ``prefix_length`` and ``time_sync_monitoring``.
    A missing ``priority`` takes the role default and a missing
    ``auth_secret_confirm`` is taken to match.
    """
    role = parse_role(raw.get("role"))
    interface = validate_interface(raw.get("interface"), available_interfaces)

    priority_raw = raw.get("priority")
    priority = (
        role.default_priority if priority_raw in (None, "") else parse_priority(priority_raw)
    )

    no_preempt = False
    if role is NodeRole.SECONDARY:
        no_preempt = _as_bool(raw.get("no_preempt", False), "no_preempt")

    secret = raw.get("auth_secret")
    shared = ClusterSharedConfig(
        group_id=parse_group_id(raw.get("group_id")),
        auth_secret=validate_auth_secret(secret, raw.get("auth_secret_confirm", secret)),
        floating_address=parse_floating_address(raw.get("floating_address")),
        prefix_length=parse_prefix_length(raw.get("prefix_length")),
    )

    health = HealthCheckPolicy(
        resolver_unit=resolver_unit,
        time_sync_monitoring=_as_bool(raw.get("time_sync_monitoring", False), "time_sync_monitoring"),
        time_sync_tool=time_sync_tool,
    )

    return ClusterConfigModel(
        node=NodeConfig(role=role, interface=interface, priority=priority, no_preempt=no_preempt),
        shared=shared,
        health=health,
    )


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    return parse_yes_no(value, field=field)
