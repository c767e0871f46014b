"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from orgchart.config.policies import HierarchyPolicy, Policies, load_policies
from orgchart.config.settings import Settings


@pytest.fixture
def minimal_policy_dict() -> dict:
    return {
        "policy_version": "test-version",
        "hierarchy": {
            "max_records": 100,
            "display_name_attribute": " title ",
            "max_direct_reports": 5,
        },
    }


def test_load_policies_from_dict(minimal_policy_dict: dict) -> None:
    policies = load_policies(minimal_policy_dict)
    assert isinstance(policies, Policies)
    assert policies.hierarchy.max_records == 100
    assert policies.hierarchy.display_name_attribute == "title"


def test_load_policies_from_yaml_with_env_override(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, minimal_policy_dict: dict
) -> None:
    path = tmp_path / "policies.yaml"
    path.write_text(yaml.safe_dump(minimal_policy_dict), encoding="utf-8")
    monkeypatch.setenv("ORGCHART_POLICY__HIERARCHY__MAX_DIRECT_REPORTS", "12")

    policies = load_policies(path)
    assert policies.hierarchy.max_direct_reports == 12


def test_load_policies_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_policies(tmp_path / "nope.yaml")


def test_hierarchy_policy_rejects_invalid_values() -> None:
    with pytest.raises(ValueError):
        HierarchyPolicy(max_records=0)
    with pytest.raises(ValueError):
        HierarchyPolicy(display_name_attribute="   ")


def test_settings_environment_override(tmp_path: Path, minimal_policy_dict: dict) -> None:
    default_yaml = {
        "environment": "development",
        "create_dirs": False,
        "log_level": "INFO",
        "policies": minimal_policy_dict,
    }
    testing_yaml = {
        "log_level": "DEBUG",
        "policies": {
            "policy_version": "testing",
            "hierarchy": {"max_records": 7},
        },
    }
    (tmp_path / "default.yaml").write_text(yaml.safe_dump(default_yaml), encoding="utf-8")
    (tmp_path / "testing.yaml").write_text(yaml.safe_dump(testing_yaml), encoding="utf-8")

    settings = Settings(config_dir=tmp_path, environment="testing")
    assert settings.log_level == "DEBUG"
    assert settings.policies.policy_version == "testing"
    assert settings.policies.hierarchy.max_records == 7
    assert settings.policies.hierarchy.max_direct_reports == 5


def test_settings_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, minimal_policy_dict: dict) -> None:
    default_yaml = {
        "create_dirs": False,
        "policies": minimal_policy_dict,
    }
    (tmp_path / "default.yaml").write_text(yaml.safe_dump(default_yaml), encoding="utf-8")

    monkeypatch.setenv("ORGCHART_SETTINGS__log_level", "WARNING")

    settings = Settings(config_dir=tmp_path)
    assert settings.log_level == "WARNING"
    assert settings.log_file.name == "orgchart.log"


def test_settings_create_dirs(tmp_path: Path) -> None:
    settings = Settings(
        config_dir=tmp_path,
        paths={"output_dir": tmp_path / "out", "logs_dir": tmp_path / "logs"},
    )
    assert (tmp_path / "out").is_dir()
    assert (tmp_path / "logs").is_dir()
    assert settings.policy_version == Policies().policy_version
