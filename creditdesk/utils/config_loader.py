"""
Configuration loader for the NAV handoff
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "nav_config.yml"
CONFIG_PATH_ENV = "NAV_CONFIG_PATH"

# environment variable -> (section, key)
_ENV_OVERRIDES = {
    "NAV_BASE_URL": ("nav", "base_url"),
    "NAV_USERNAME": ("nav", "username"),
    "NAV_PASSWORD": ("nav", "password"),
    "NAV_TIMEOUT_SECONDS": ("nav", "timeout_seconds"),
    "NAV_USE_MOCK": ("nav", "use_mock"),
    "LOG_LEVEL": (None, "log_level"),
}


class NavConfig(BaseModel):
    """Connection to the NAV web services"""

    base_url: str = "http://localhost:7047/DynamicsNAV/WS/CRONOS/"
    username: str = ""
    password: SecretStr = SecretStr("")
    timeout_seconds: float = Field(default=30.0, gt=0, le=600)
    use_mock: bool = False

    def endpoint(self, service_path: str) -> str:
        return self.base_url.rstrip("/") + "/" + service_path.lstrip("/")


class NavSettings(BaseModel):
    """Fixed values sent with every NAV customer / contract"""

    country_code: str = "RO"
    currency_code: str = ""  # empty means RON
    exchange_rate: float = 1
    payment_schedule_type: str = "Equal"  # Equal, Descending
    contract_status: str = "Draft"  # Draft, Validated, Canceled, Closed
    insurance_vendor_no: str = "FZ-000003"
    address_line_width: int = Field(default=50, ge=10, le=250)
    contract_types: Dict[str, str] = Field(
        default_factory=lambda: {"1": "Goods", "2": "Personal_Needs"}
    )


class AppConfig(BaseModel):
    """Complete application configuration"""

    nav: NavConfig = Field(default_factory=NavConfig)
    settings: NavSettings = Field(default_factory=NavSettings)
    translations: Dict[str, str] = Field(default_factory=dict)
    log_level: str = "INFO"


def load_app_config(config_path: Optional[Path] = None, *, use_env: bool = True) -> AppConfig:
    """
    Load and validate configuration from a YAML file, then apply environment overrides

    Args:
        config_path: Path to config file. Defaults to $NAV_CONFIG_PATH (read only with use_env),
            else the nav_config.yml shipped inside the package
        use_env: Read .env and NAV_* variables on top of the file

    Returns:
        Validated AppConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if use_env:
        load_dotenv()

    if config_path is None:
        env_path = os.environ.get(CONFIG_PATH_ENV) if use_env else None
        config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    if use_env:
        config_data = apply_env_overrides(config_data, os.environ)

    try:
        config = AppConfig(**config_data)
        logger.info("Successfully loaded NAV config from %s", config_path)
        return config
    except ValidationError as e:
        logger.error(f"Config validation failed: {e}")
        raise


def apply_env_overrides(config_data: Dict[str, Any], environ) -> Dict[str, Any]:
    """Return a copy of `config_data` with NAV_* environment values merged in"""
    merged: Dict[str, Any] = {key: dict(value) if isinstance(value, dict) else value for key, value in config_data.items()}
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        if section is None:
            merged[key] = value
        else:
            merged.setdefault(section, {})[key] = value
    return merged
