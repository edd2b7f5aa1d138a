"""
Central configuration for the procurement tracker.

All paths and thresholds are defined here.
Override via environment variables or by passing a Config instance directly.

Settings priority (highest wins):
  1. Environment variables
  2. config/settings.json  (admin-editable, persisted)
  3. Hardcoded defaults in this file
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

# Project root (directory containing this file)
PROJECT_ROOT = Path(__file__).parent

# Default data locations (relative to project root)
DEFAULT_DATA_DIR   = PROJECT_ROOT / "data"
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"

# Environment variables that win over settings.json
_ENV_KEYS = {
    "stock_warning_threshold": "STOCK_WARNING_THRESHOLD",
    "stock_critical_ratio":    "STOCK_CRITICAL_RATIO",
    "strict_flow_references":  "STRICT_FLOW_REFERENCES",
}


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _env_bool(name: str, default: str) -> bool:
    return _parse_bool(os.getenv(name, default))


@dataclass
class Config:
    # --- Data source paths ---
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    )
    config_dir: Path = field(
        default_factory=lambda: Path(os.getenv("CONFIG_DIR", str(DEFAULT_CONFIG_DIR)))
    )

    # --- Stock alerts ---
    stock_warning_threshold: float = field(
        default_factory=lambda: float(os.getenv("STOCK_WARNING_THRESHOLD", "10"))
    )
    # Below threshold * ratio a level is "critical" rather than "warning"
    stock_critical_ratio: float = field(
        default_factory=lambda: float(os.getenv("STOCK_CRITICAL_RATIO", "0.5"))
    )

    # --- Flow tracking ---
    # False: rows pointing at a missing parent are dropped from the tree.
    # True:  they raise DanglingReferenceError / RouteMismatchError.
    strict_flow_references: bool = field(
        default_factory=lambda: _env_bool("STRICT_FLOW_REFERENCES", "false")
    )

    # --- Output ---
    pretty_json: bool = True       # Indent JSON output for human readability

    def __post_init__(self) -> None:
        """Overlay runtime-tunable settings from settings.json if present."""
        settings_file = self.config_dir / "settings.json"
        if not settings_file.exists():
            return
        _type_map: dict[str, Callable] = {
            "stock_warning_threshold": float,
            "stock_critical_ratio":    float,
            "strict_flow_references":  _parse_bool,
            "pretty_json":             _parse_bool,
        }
        try:
            with open(settings_file, encoding="utf-8") as f:
                overrides = {k: v for k, v in json.load(f).items() if not k.startswith("_")}
            for key, val in overrides.items():
                if key not in _type_map or not hasattr(self, key):
                    continue
                env_name = _ENV_KEYS.get(key)
                if env_name and os.getenv(env_name) is not None:
                    continue
                setattr(self, key, _type_map[key](val))
        except Exception as exc:
            logger.warning("Failed to load settings.json: %s", exc)

    @property
    def report_template(self) -> Path:
        """Operator-editable Jinja2 template for flow reports."""
        return self.config_dir / "flow_report.html.j2"

    def data_file(self, name: str) -> Path:
        return self.data_dir / name
