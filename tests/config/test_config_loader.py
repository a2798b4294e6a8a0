"""Tests for YAML configuration loading and the active-config entrypoint."""

from decimal import Decimal

import pytest
import yaml

from payroll_config import compute_checksum, get_active_config, load_config_file
from payroll_config.schema import PayrollEngineConfig


def _write(tmp_path, data) -> "Path":
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


@pytest.fixture
def shipped_data():
    from payroll_config import _DEFAULT_CONFIG_FILE

    with open(_DEFAULT_CONFIG_FILE) as f:
        return yaml.safe_load(f)


class TestShippedConfig:

    def test_matches_in_code_default(self):
        loaded = get_active_config()
        default = PayrollEngineConfig.default()

        assert loaded.config_id == "MG-IRSA-2025"
        assert loaded.currency == "MGA"
        assert loaded.brackets == default.brackets
        assert loaded.withholdings == default.withholdings
        assert loaded.advances == default.advances
        assert loaded.runs == default.runs

    def test_amounts_are_decimals(self):
        config = get_active_config()
        assert config.brackets.minimum_tax == Decimal("3000")
        assert all(isinstance(b.rate, Decimal) for b in config.brackets.brackets)
        assert config.brackets.brackets[-1].ceiling is None

    def test_checksum_is_stable(self):
        assert get_active_config().checksum == get_active_config().checksum
        assert len(get_active_config().checksum) == 64

    def test_trace_logged(self, captured_logs):
        config = get_active_config()

        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_CONFIG_TRACE"]
        assert traces
        assert traces[-1]["checksum"] == config.checksum
        assert traces[-1]["bracket_count"] == 5


class TestLoading:

    def test_float_rates_parse_exactly(self, tmp_path, shipped_data):
        shipped_data["withholdings"] = {"ostie_rate": 0.02, "cnaps_rate": 0.01}
        config = load_config_file(_write(tmp_path, shipped_data))
        assert config.withholdings.ostie_rate == Decimal("0.02")

    def test_optional_sections_default(self, tmp_path, shipped_data):
        del shipped_data["advances"]
        del shipped_data["runs"]
        config = load_config_file(_write(tmp_path, shipped_data))
        assert config.advances.cap_ratio == Decimal("0.5")
        assert config.runs.lock_timeout_seconds == 10.0

    def test_checksum_changes_with_content(self, tmp_path, shipped_data):
        original = compute_checksum(shipped_data)
        shipped_data["irsa"]["minimum_tax"] = "4000"
        assert compute_checksum(shipped_data) != original

    def test_missing_section_raises(self, tmp_path, shipped_data):
        del shipped_data["irsa"]
        with pytest.raises(KeyError):
            load_config_file(_write(tmp_path, shipped_data))

    def test_bad_decimal_raises(self, tmp_path, shipped_data):
        shipped_data["irsa"]["minimum_tax"] = "three thousand"
        with pytest.raises(ValueError, match="irsa.minimum_tax"):
            load_config_file(_write(tmp_path, shipped_data))

    def test_inconsistent_base_amount_raises(self, tmp_path, shipped_data):
        shipped_data["irsa"]["brackets"][3]["base_amount"] = "12000"
        with pytest.raises(ValueError, match="base amount"):
            load_config_file(_write(tmp_path, shipped_data))

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")
