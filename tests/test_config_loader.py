from pathlib import Path

import pytest
from pydantic import ValidationError

import creditdesk
from creditdesk.utils.config_loader import DEFAULT_CONFIG_PATH, apply_env_overrides, load_app_config


def test_default_config_file_loads():
    config = load_app_config(DEFAULT_CONFIG_PATH, use_env=False)

    assert config.nav.timeout_seconds == 30
    assert config.settings.insurance_vendor_no == "FZ-000003"
    assert config.settings.contract_types == {"1": "Goods", "2": "Personal_Needs"}
    assert config.translations["Street"] == "Str."


def test_default_config_file_ships_inside_the_package():
    assert Path(creditdesk.__file__).parent in DEFAULT_CONFIG_PATH.parents
    assert DEFAULT_CONFIG_PATH.is_file()


def test_default_path_used_without_argument(monkeypatch):
    monkeypatch.delenv("NAV_CONFIG_PATH", raising=False)

    config = load_app_config(use_env=False)

    assert config.settings.insurance_vendor_no == "FZ-000003"


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "nav.yml"
    path.write_text("settings:\n  insurance_vendor_no: FZ-999\n", encoding="utf-8")
    monkeypatch.setenv("NAV_CONFIG_PATH", str(path))

    assert load_app_config().settings.insurance_vendor_no == "FZ-999"
    assert load_app_config(use_env=False).settings.insurance_vendor_no == "FZ-000003"


def test_missing_config_path_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("NAV_CONFIG_PATH", str(tmp_path / "nope.yml"))

    with pytest.raises(FileNotFoundError):
        load_app_config()


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(tmp_path / "nope.yml", use_env=False)


def test_invalid_config_is_rejected(tmp_path):
    path = tmp_path / "nav.yml"
    path.write_text("nav:\n  timeout_seconds: 0\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_app_config(path, use_env=False)


def test_empty_config_file_uses_defaults(tmp_path):
    path = tmp_path / "nav.yml"
    path.write_text("", encoding="utf-8")

    config = load_app_config(path, use_env=False)

    assert config.settings.payment_schedule_type == "Equal"
    assert config.nav.use_mock is False


def test_environment_overrides_file_values(tmp_path, monkeypatch):
    path = tmp_path / "nav.yml"
    path.write_text("nav:\n  base_url: http://file/\n  timeout_seconds: 30\n", encoding="utf-8")
    monkeypatch.setenv("NAV_BASE_URL", "http://env/")
    monkeypatch.setenv("NAV_USERNAME", "svc")
    monkeypatch.setenv("NAV_PASSWORD", "pw")
    monkeypatch.setenv("NAV_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("NAV_USE_MOCK", "true")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    config = load_app_config(path)

    assert config.nav.base_url == "http://env/"
    assert config.nav.username == "svc"
    assert config.nav.password.get_secret_value() == "pw"
    assert config.nav.timeout_seconds == 5
    assert config.nav.use_mock is True
    assert config.log_level == "DEBUG"
    assert "pw" not in repr(config)


def test_apply_env_overrides_does_not_mutate_input():
    data = {"nav": {"base_url": "http://file/"}}

    merged = apply_env_overrides(data, {"NAV_BASE_URL": "http://env/", "NAV_USERNAME": ""})

    assert merged["nav"] == {"base_url": "http://env/"}
    assert data["nav"]["base_url"] == "http://file/"


def test_endpoint_joins_base_url_and_service_path():
    config = load_app_config(DEFAULT_CONFIG_PATH, use_env=False)

    assert config.nav.endpoint("Page/ContractList") == "http://localhost:7047/DynamicsNAV/WS/CRONOS/Page/ContractList"
