"""CLI configuration: config file loading, logging setup and runtime overrides.

Precedence is CLI flags, then the config file, then environment variables,
then the defaults in ``constants.Constants``.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants
from common.logging_utils import configure_logging
from versioning.models import CheckPolicy

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration file cannot be used."""


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load configuration from a YAML (or JSON) file.

    Args:
        config_path: Path to YAML/JSON config file.

    Returns:
        Configuration dict; empty when no path is given.

    Raises:
        ConfigError: if the file is missing or not a mapping
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    # --loglevel wins; without it the environment variable applies
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return value


def resolve_policy(args: Any, config: Dict[str, Any]) -> CheckPolicy:
    """Combine the ``updates`` config section with CLI flags."""
    updates = _section(config, "updates")
    include_platform = bool(updates.get("include_platform", True))
    always_report = bool(updates.get("always_report_up_to_date", False))
    report_anomalies = bool(updates.get("report_anomalies", True))

    if getattr(args, "NO_PLATFORM", False):
        include_platform = False
    if getattr(args, "ALWAYS_REPORT_UP_TO_DATE", False):
        always_report = True
    if getattr(args, "HIDE_ANOMALIES", False):
        report_anomalies = False

    return CheckPolicy(
        include_platform=include_platform,
        always_report_up_to_date=always_report,
        report_anomalies=report_anomalies,
    )


def resolve_style(args: Any, config: Dict[str, Any]) -> str:
    style = getattr(args, "STYLE", None) or _section(config, "updates").get("style") or Constants.STYLES[0]
    style = str(style).lower()
    if style not in Constants.STYLES:
        raise ConfigError(f"Unknown report style '{style}'")
    return style


def resolve_packagist_url(args: Any, config: Dict[str, Any]) -> Optional[str]:
    return getattr(args, "PACKAGIST_URL", None) or _section(config, "updates").get("packagist_url")


def apply_http_overrides(config: Dict[str, Any]) -> None:
    """Apply the ``http`` config section to the HTTP tunables."""
    http = _section(config, "http")
    try:
        if http.get("timeout") is not None:
            Constants.REQUEST_TIMEOUT = int(http["timeout"])
        if http.get("retries") is not None:
            Constants.HTTP_RETRY_MAX = max(1, int(http["retries"]))
        if http.get("cache_ttl") is not None:
            Constants.HTTP_CACHE_TTL_SEC = int(http["cache_ttl"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid http setting: {e}") from e
