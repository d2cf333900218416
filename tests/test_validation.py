"""Tests for parameter validation and the non-interactive model builder."""

from __future__ import annotations

from typing import Any

import pytest

from pihole_ha.core.errors import ValidationError
from pihole_ha.core.model import (
    ClusterConfigModel,
    ClusterSharedConfig,
    HealthCheckPolicy,
    NodeConfig,
    NodeRole,
    advisory_warnings,
)
from pihole_ha.core.validation import (
    build_model,
    parse_floating_address,
    parse_group_id,
    parse_prefix_length,
    parse_priority,
    parse_role,
    parse_yes_no,
    validate_auth_secret,
    validate_interface,
)

INTERFACES = ["eth0", "lo", "wlan0"]


class TestRoleValidation:
    """Test role parsing."""

    @pytest.mark.parametrize("raw", ["MASTER", "master", "Primary", " primary "])
    def test_primary_aliases(self, raw: str):
        assert parse_role(raw) is NodeRole.PRIMARY

    @pytest.mark.parametrize("raw", ["BACKUP", "backup", "Secondary"])
    def test_secondary_aliases(self, raw: str):
        assert parse_role(raw) is NodeRole.SECONDARY

    @pytest.mark.parametrize("raw", ["", "slave", "leader", None])
    def test_rejects_unknown_roles(self, raw: Any):
        with pytest.raises(ValidationError) as exc_info:
            parse_role(raw)
        assert exc_info.value.field == "role"


class TestInterfaceValidation:
    """Test interface name checks."""

    def test_accepts_existing_interface(self):
        assert validate_interface("eth0", INTERFACES) == "eth0"

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validate_interface("  ", INTERFACES)

    def test_rejects_missing_interface(self):
        with pytest.raises(ValidationError, match="does not appear to exist"):
            validate_interface("eth9", INTERFACES)


class TestNumericValidation:
    """Test priority, group id and prefix length parsing."""

    @pytest.mark.parametrize("raw, expected", [("101", 101), ("0", 0), (100, 100)])
    def test_priority_accepts_unsigned_integers(self, raw: Any, expected: int):
        assert parse_priority(raw) == expected

    @pytest.mark.parametrize("raw", ["", "-1", "1.5", "abc", "10 0"])
    def test_priority_rejects_non_integers(self, raw: str):
        with pytest.raises(ValidationError) as exc_info:
            parse_priority(raw)
        assert exc_info.value.field == "priority"

    @pytest.mark.parametrize("raw, expected", [("0", 0), ("51", 51), ("255", 255)])
    def test_group_id_bounds(self, raw: str, expected: int):
        assert parse_group_id(raw) == expected

    @pytest.mark.parametrize("raw", ["256", "-1", "1000", "x"])
    def test_group_id_out_of_range(self, raw: str):
        with pytest.raises(ValidationError) as exc_info:
            parse_group_id(raw)
        assert exc_info.value.field == "group_id"

    @pytest.mark.parametrize(
        "parse, field",
        [
            (parse_priority, "priority"),
            (parse_group_id, "group_id"),
            (parse_prefix_length, "prefix_length"),
        ],
    )
    def test_overlong_digit_strings_are_rejected(self, parse, field: str):
        with pytest.raises(ValidationError) as exc_info:
            parse("9" * 5000)
        assert exc_info.value.field == field

    @pytest.mark.parametrize("raw, expected", [("1", 1), ("24", 24), ("32", 32)])
    def test_prefix_length_bounds(self, raw: str, expected: int):
        assert parse_prefix_length(raw) == expected

    @pytest.mark.parametrize("raw", ["0", "33", "", "/24"])
    def test_prefix_length_out_of_range(self, raw: str):
        with pytest.raises(ValidationError) as exc_info:
            parse_prefix_length(raw)
        assert exc_info.value.field == "prefix_length"


class TestAuthSecretValidation:
    """Test double-entry secret checks."""

    def test_matching_entries(self):
        assert validate_auth_secret("s3cr3t", "s3cr3t") == "s3cr3t"

    def test_secret_is_not_stripped(self):
        assert validate_auth_secret(" pass ", " pass ") == " pass "

    def test_empty_secret(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validate_auth_secret("", "")

    def test_mismatch(self):
        with pytest.raises(ValidationError, match="do not match"):
            validate_auth_secret("s3cr3t", "s3cr3x")

    @pytest.mark.parametrize("secret", ['pa"ss', "pa\nss", "pa\tss"])
    def test_unquotable_characters(self, secret: str):
        with pytest.raises(ValidationError, match="double quotes"):
            validate_auth_secret(secret, secret)


class TestFloatingAddressValidation:
    """Test the dotted-quad format check."""

    def test_accepts_dotted_quad(self):
        assert parse_floating_address("192.168.0.5") == "192.168.0.5"

    def test_octet_ranges_are_not_checked(self):
        assert parse_floating_address("999.999.999.999") == "999.999.999.999"

    @pytest.mark.parametrize(
        "raw", ["", "192.168.0", "192.168.0.5/24", "1234.1.1.1", "a.b.c.d", "::1"]
    )
    def test_rejects_malformed_addresses(self, raw: str):
        with pytest.raises(ValidationError) as exc_info:
            parse_floating_address(raw)
        assert exc_info.value.field == "floating_address"


class TestYesNo:
    """Test yes/no answers."""

    @pytest.mark.parametrize("raw", ["yes", "Y", "YES"])
    def test_yes(self, raw: str):
        assert parse_yes_no(raw) is True

    @pytest.mark.parametrize("raw", ["no", "n", "No"])
    def test_no(self, raw: str):
        assert parse_yes_no(raw) is False

    def test_empty_uses_default(self):
        assert parse_yes_no("", default=True) is True
        assert parse_yes_no("", default=False) is False

    def test_invalid_answer(self):
        with pytest.raises(ValidationError, match="'yes' or 'no'"):
            parse_yes_no("maybe", default=True)


class TestBuildModel:
    """Test building a model from raw inputs without prompting."""

    def test_primary_model(self, raw_inputs: dict[str, Any]):
        model = build_model(raw_inputs, INTERFACES)

        assert model.node == NodeConfig(NodeRole.PRIMARY, "eth0", 101, False)
        assert model.shared.group_id == 51
        assert model.shared.floating_cidr == "192.168.0.5/24"
        assert model.health.resolver_unit == "pihole-FTL.service"
        assert model.health.time_sync_monitoring is False

    def test_missing_priority_uses_role_default(self, raw_inputs: dict[str, Any]):
        raw_inputs.update(role="backup", priority="")
        model = build_model(raw_inputs, INTERFACES)
        assert model.node.priority == 100

    def test_no_preempt_ignored_for_primary(self, raw_inputs: dict[str, Any]):
        raw_inputs["no_preempt"] = True
        model = build_model(raw_inputs, INTERFACES)
        assert model.node.no_preempt is False

    def test_no_preempt_kept_for_secondary(self, raw_inputs: dict[str, Any]):
        raw_inputs.update(role="BACKUP", no_preempt="yes")
        model = build_model(raw_inputs, INTERFACES)
        assert model.node.no_preempt is True

    @pytest.mark.parametrize(
        "field, value",
        [
            ("group_id", "256"),
            ("prefix_length", "0"),
            ("prefix_length", "33"),
            ("auth_secret_confirm", "other"),
            ("interface", "eth7"),
        ],
    )
    def test_invalid_field_is_reported(self, raw_inputs: dict[str, Any], field: str, value: str):
        raw_inputs[field] = value
        with pytest.raises(ValidationError) as exc_info:
            build_model(raw_inputs, INTERFACES)
        expected = "auth_secret" if field == "auth_secret_confirm" else field
        assert exc_info.value.field == expected


class TestAdvisoryWarnings:
    """Test non-blocking warnings."""

    def _model(self, role: NodeRole, priority: int, secret: str = "s3cr3t") -> ClusterConfigModel:
        return ClusterConfigModel(
            node=NodeConfig(role=role, interface="eth0", priority=priority),
            shared=ClusterSharedConfig(51, secret, "192.168.0.5", 24),
            health=HealthCheckPolicy(),
        )

    def test_conventional_priorities_have_no_warnings(self):
        assert advisory_warnings(self._model(NodeRole.PRIMARY, 101)) == []
        assert advisory_warnings(self._model(NodeRole.SECONDARY, 100)) == []

    def test_low_primary_priority(self):
        warnings = advisory_warnings(self._model(NodeRole.PRIMARY, 90))
        assert len(warnings) == 1
        assert "PRIMARY priority 90" in warnings[0]

    def test_high_secondary_priority(self):
        warnings = advisory_warnings(self._model(NodeRole.SECONDARY, 150))
        assert "SECONDARY priority 150" in warnings[0]

    def test_priority_above_vrrp_range(self):
        warnings = advisory_warnings(self._model(NodeRole.PRIMARY, 300))
        assert any("exceeds 255" in w for w in warnings)

    def test_long_secret(self):
        warnings = advisory_warnings(self._model(NodeRole.PRIMARY, 101, secret="longer-than-8"))
        assert any("first 8 characters" in w for w in warnings)

    def test_shared_config_repr_hides_secret(self):
        shared = ClusterSharedConfig(51, "s3cr3t", "192.168.0.5", 24)
        assert "s3cr3t" not in repr(shared)
