"""Configuration loading.

Defaults come from the environment (a local `.env` is honoured), and an
optional YAML file can override them:

    include_missing_uat_warning: false
    log_level: DEBUG
"""
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError
from .logging_utils import logger
from .rules import RuleSet

TRUTHY = ("1", "true", "yes", "on")
FALSY = ("0", "false", "no", "off")

CONFIG_KEYS = ("include_missing_uat_warning", "log_level")


@dataclass(frozen=True)
class ComplianceConfig:
    include_missing_uat_warning: bool = True
    log_level: str = "INFO"

    def rule_set(self) -> RuleSet:
        return RuleSet(include_missing_uat_warning=self.include_missing_uat_warning)


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value or "").strip().lower()
    if s in TRUTHY:
        return True
    if s in FALSY:
        return False
    return default


def load_config_from_env() -> ComplianceConfig:
    # .env is looked up from the working directory, not from this package
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)
    return ComplianceConfig(
        include_missing_uat_warning=_parse_bool(os.getenv("COMPLIANCE_INCLUDE_MISSING_UAT_WARNING"), True),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )


def load_config_file(path: Union[str, Path], base: Optional[ComplianceConfig] = None) -> ComplianceConfig:
    """Apply a YAML config file on top of `base` (defaults when None)."""
    p = Path(path)
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config {p}: expected a mapping")

    unknown = sorted(set(data) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigError(f"Invalid config {p}: unknown keys {', '.join(unknown)}")

    cfg = base or ComplianceConfig()
    overrides: Dict[str, Any] = {}
    if "include_missing_uat_warning" in data:
        value = data["include_missing_uat_warning"]
        if not isinstance(value, bool):
            raise ConfigError(f"Invalid config {p}: include_missing_uat_warning must be true/false")
        overrides["include_missing_uat_warning"] = value
    if "log_level" in data:
        overrides["log_level"] = str(data["log_level"]).strip().upper()
    return replace(cfg, **overrides)


def load_config(path: Optional[Union[str, Path]] = None) -> ComplianceConfig:
    """Environment defaults, overridden by `path` or $COMPLIANCE_CONFIG when set."""
    cfg = load_config_from_env()
    path = path or os.getenv("COMPLIANCE_CONFIG")
    if path:
        cfg = load_config_file(path, base=cfg)
    logger.set_level(cfg.log_level)
    logger.debug("config_loaded", path=str(path or ""), include_missing_uat_warning=cfg.include_missing_uat_warning)
    return cfg
