"""Loading and validating the department YAML configuration."""

from decimal import Decimal
from uuid import uuid4

import pytest
import yaml

from gp_config import DEFAULT_CONFIG_PATH, get_active_config
from gp_config.loader import compute_checksum, parse_department_config


class TestPackagedDefaults:

    def test_packaged_config_loads(self):
        config = get_active_config()
        assert config.config_id == "department-default"
        assert config.hours_per_day == Decimal("8")
        assert config.employee_bonus_rate == Decimal("0.10")
        assert config.default_salary_ratio == Decimal("0.30")
        assert config.healthy_margin_threshold == Decimal("30")
        assert "flight" in config.expense_categories

    def test_load_is_traced(self, captured_logs):
        config = get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "GP_CONFIG_TRACE"]
        assert traces[-1]["checksum"] == config.checksum

    def test_checksum_is_stable(self):
        assert get_active_config(DEFAULT_CONFIG_PATH).checksum == get_active_config().checksum


class TestParsing:

    def test_missing_keys_fall_back(self):
        config = parse_department_config({})
        assert config.hours_per_day == Decimal("8")
        assert config.default_salary_ratio is None
        assert dict(config.salary_ratios) == {}

    def test_project_ratio_overrides_default(self):
        pid = uuid4()
        config = parse_department_config({
            "default_salary_ratio": "0.25",
            "salary_ratios": {str(pid): 0.4},
        })
        assert config.salary_ratio_for(pid) == Decimal("0.4")
        assert config.salary_ratio_for(uuid4()) == Decimal("0.25")

    def test_float_values_become_exact_decimals(self):
        assert parse_department_config({"hours_per_day": 7.5}).hours_per_day == Decimal("7.5")

    @pytest.mark.parametrize("data, key", [
        ({"hours_per_day": 0}, "hours_per_day"),
        ({"hours_per_day": "eight"}, "hours_per_day"),
        ({"hours_per_day": "NaN"}, "hours_per_day"),
        ({"hours_per_day": float("inf")}, "hours_per_day"),
        ({"default_salary_ratio": "NaN"}, "default_salary_ratio"),
        ({"employee_bonus_rate": 1.5}, "employee_bonus_rate"),
        ({"default_salary_ratio": -0.1}, "default_salary_ratio"),
        ({"salary_ratios": {"not-a-uuid": 0.2}}, "salary_ratios"),
        ({"expense_categories": []}, "expense_categories"),
        ({"expense_categories": "lodging"}, "expense_categories"),
    ])
    def test_malformed_values(self, data, key):
        with pytest.raises(ValueError, match=key):
            parse_department_config(data)

    def test_root_must_be_mapping(self):
        with pytest.raises(ValueError):
            parse_department_config(["hours_per_day"])


class TestFiles:

    def test_custom_file(self, tmp_path):
        path = tmp_path / "dept.yaml"
        path.write_text(yaml.safe_dump({"config_id": "north", "hours_per_day": 10}))
        config = get_active_config(path)
        assert config.config_id == "north"
        assert config.hours_per_day == Decimal("10")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
