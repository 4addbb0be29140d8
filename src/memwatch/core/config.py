# src/memwatch/core/config.py

import copy
import logging
import os
import re
from typing import List, Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("table", "csv", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL")
_INTERVAL_PATTERN = re.compile(r"^(\d+)([smh])$")
_INTERVAL_MULTIPLIERS = {"s": 1, "m": 60, "h": 3600}


def parse_comma_separated(value: Optional[str]) -> List[str]:
    """Splits a comma-separated string into trimmed, non-empty entries."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_interval_seconds(interval: str) -> int:
    """Parses a duration such as '30s', '5m' or '1h' into seconds."""
    match = _INTERVAL_PATTERN.match((interval or "").strip().lower())
    if not match:
        raise ConfigError(f"Invalid interval format: '{interval}'. Use '<number>s', '<number>m' or '<number>h'.")
    value, unit = int(match.group(1)), match.group(2)
    return value * _INTERVAL_MULTIPLIERS[unit]


def _get_env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if not value:
        return default
    return value.lower() in ("true", "1", "t", "y", "yes")


def _get_env_number(key: str, default, cast):
    value = os.getenv(key)
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        logger.warning("Invalid value '%s' for %s - falling back to %s", value, key, default)
        return default


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    CLI flags are layered on top with `with_overrides`.
    """

    def __init__(self):
        # --- Kubernetes variables ---
        self.NAMESPACE = os.getenv("NAMESPACE", "")
        self.ALL_NAMESPACES = _get_env_bool("ALL_NAMESPACES", False)
        self.KUBECONFIG = os.getenv("KUBECONFIG", "")
        self.IN_CLUSTER = _get_env_bool("IN_CLUSTER", False)

        # --- Monitoring variables ---
        self.CHECK_INTERVAL = os.getenv("CHECK_INTERVAL", "30s")
        self.MEMORY_THRESHOLD_MB = _get_env_number("MEMORY_THRESHOLD_MB", 1024, int)
        self.MEMORY_WARNING_PERCENT = _get_env_number("MEMORY_WARNING_PERCENT", 80.0, float)

        # --- Logging variables ---
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

        # --- Display variables ---
        self.LABELS = parse_comma_separated(os.getenv("LABELS", ""))
        self.ANNOTATIONS = parse_comma_separated(os.getenv("ANNOTATIONS", ""))
        self.OUTPUT = os.getenv("OUTPUT", "table").lower()
        self.OUTPUT_PATH = os.getenv("OUTPUT_PATH", "")

        self._apply_default_namespace()

    def _apply_default_namespace(self):
        if not self.NAMESPACE and not self.ALL_NAMESPACES:
            self.ALL_NAMESPACES = True

    def with_overrides(
        self,
        namespace: Optional[str] = None,
        all_namespaces: bool = False,
        kubeconfig: Optional[str] = None,
        in_cluster: bool = False,
        check_interval: Optional[str] = None,
        memory_threshold_mb: Optional[int] = None,
        memory_warning_percent: Optional[float] = None,
        log_level: Optional[str] = None,
        labels: Optional[str] = None,
        annotations: Optional[str] = None,
        output: Optional[str] = None,
        output_path: Optional[str] = None,
    ) -> "Config":
        """
        Returns a copy of this configuration where every non-empty argument
        replaces the environment value. CLI flags take precedence over
        environment variables.
        """
        if namespace and all_namespaces:
            raise ConfigError("--namespace and --all-namespaces are mutually exclusive")

        cfg = copy.copy(self)
        cfg.LABELS = list(self.LABELS)
        cfg.ANNOTATIONS = list(self.ANNOTATIONS)

        if namespace:
            cfg.NAMESPACE = namespace
            cfg.ALL_NAMESPACES = False
        elif all_namespaces:
            cfg.NAMESPACE = ""
            cfg.ALL_NAMESPACES = True
        if kubeconfig:
            cfg.KUBECONFIG = kubeconfig
        if in_cluster:
            cfg.IN_CLUSTER = True
        if check_interval:
            cfg.CHECK_INTERVAL = check_interval
        if memory_threshold_mb is not None:
            cfg.MEMORY_THRESHOLD_MB = memory_threshold_mb
        if memory_warning_percent is not None:
            cfg.MEMORY_WARNING_PERCENT = memory_warning_percent
        if log_level:
            cfg.LOG_LEVEL = log_level
        if labels:
            cfg.LABELS = parse_comma_separated(labels)
        if annotations:
            cfg.ANNOTATIONS = parse_comma_separated(annotations)
        if output:
            cfg.OUTPUT = output.lower()
        if output_path:
            cfg.OUTPUT_PATH = output_path

        cfg._apply_default_namespace()
        return cfg

    @property
    def CHECK_INTERVAL_SECONDS(self) -> int:
        return parse_interval_seconds(self.CHECK_INTERVAL)

    def validate_instance(self):
        if self.CHECK_INTERVAL_SECONDS <= 0:
            raise ConfigError("CHECK_INTERVAL must be positive")
        if self.MEMORY_THRESHOLD_MB <= 0:
            raise ConfigError("MEMORY_THRESHOLD_MB must be positive")
        if self.MEMORY_WARNING_PERCENT <= 0 or self.MEMORY_WARNING_PERCENT > 100:
            raise ConfigError("MEMORY_WARNING_PERCENT must be between 0 and 100")
        if self.OUTPUT not in OUTPUT_FORMATS:
            raise ConfigError(f"OUTPUT must be one of {', '.join(OUTPUT_FORMATS)}")
        if self.LOG_LEVEL.upper() not in LOG_LEVELS:
            raise ConfigError(f"Invalid LOG_LEVEL '{self.LOG_LEVEL}'")
        if self.NAMESPACE and self.ALL_NAMESPACES:
            raise ConfigError("NAMESPACE and ALL_NAMESPACES are mutually exclusive")


# Instantiate the config to be imported by other modules
config = Config()
