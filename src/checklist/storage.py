"""Config directory layout, YAML config IO, and log setup for checklist."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import Any, Callable

import click
import yaml

from .layout import MIN_HEIGHT, MIN_WIDTH
from .models import ConfigError, StatusFilter

APP_NAME = "checklist"
HOME_ENV = "CHECKLIST_HOME"
DEFAULT_DISPLAY_FILTER = StatusFilter.ALL
DEFAULT_URGENCY_SORT_DESC = True
SUPPORTED_TOP_KEYS = {"db_path", "settings"}
SUPPORTED_SETTINGS_KEYS = {"display_filter", "urgency_sort_desc", "min_width", "min_height"}
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

Warn = Callable[[str], None]


def config_dir() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path(click.get_app_dir(APP_NAME))


def config_path(root: Path | None = None) -> Path:
    return (root or config_dir()) / "config.yaml"


def theme_path(root: Path | None = None) -> Path:
    return (root or config_dir()) / "theme.yaml"


def log_path(root: Path | None = None) -> Path:
    return (root or config_dir()) / "checklist.log"


def default_db_path(root: Path | None = None) -> Path:
    return (root or config_dir()) / "tasks.yaml"


@dataclass(slots=True)
class Config:
    db_path: Path
    display_filter: StatusFilter = DEFAULT_DISPLAY_FILTER
    urgency_sort_desc: bool = DEFAULT_URGENCY_SORT_DESC
    min_width: int = MIN_WIDTH
    min_height: int = MIN_HEIGHT

    def to_dict(self) -> dict[str, Any]:
        return {
            "db_path": str(self.db_path),
            "settings": {
                "display_filter": self.display_filter.value,
                "urgency_sort_desc": self.urgency_sort_desc,
                "min_width": self.min_width,
                "min_height": self.min_height,
            },
        }


def _warn(warn: Warn | None, message: str) -> None:
    if warn is not None:
        warn(message)


def read_config_data(root: Path | None = None, warn: Warn | None = None) -> dict[str, Any] | None:
    """Return the raw config mapping, {} when unusable, or None when there is no file."""
    path = config_path(root)
    if not path.exists():
        return None
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        _warn(warn, f"Unable to parse config at {path}. Falling back to defaults.")
        return {}
    if not isinstance(payload, dict):
        _warn(warn, f"Invalid config format at {path}. Falling back to defaults.")
        return {}
    return payload


def _positive_int(settings: dict[str, Any], key: str, default: int, path: Path, warn: Warn | None) -> int:
    value = settings.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        _warn(warn, f"Invalid settings.{key} in {path}. Using default '{default}'.")
        return default
    return value


def resolve_config(root: Path | None = None, warn: Warn | None = None) -> Config | None:
    data = read_config_data(root, warn=warn)
    if data is None:
        return None

    path = config_path(root)
    for key in data.keys():
        if key not in SUPPORTED_TOP_KEYS:
            _warn(warn, f"Unsupported config key '{key}' in {path}. Ignoring.")

    raw_db_path = data.get("db_path")
    if isinstance(raw_db_path, str) and raw_db_path.strip():
        db_path = Path(raw_db_path).expanduser()
    else:
        if raw_db_path is not None:
            _warn(warn, f"Invalid db_path in {path}. Using default location.")
        db_path = default_db_path(root)

    settings = data.get("settings", {})
    if not isinstance(settings, dict):
        _warn(warn, f"Invalid settings section in {path}. Using defaults.")
        settings = {}
    for key in settings.keys():
        if key not in SUPPORTED_SETTINGS_KEYS:
            _warn(warn, f"Unsupported settings key '{key}' in {path}. Ignoring.")

    display_filter = DEFAULT_DISPLAY_FILTER
    raw_filter = settings.get("display_filter")
    if raw_filter is not None:
        try:
            display_filter = StatusFilter(raw_filter)
        except ValueError:
            _warn(
                warn,
                f"Invalid settings.display_filter in {path}. "
                f"Using default '{DEFAULT_DISPLAY_FILTER.value}'.",
            )

    urgency_sort_desc = settings.get("urgency_sort_desc", DEFAULT_URGENCY_SORT_DESC)
    if not isinstance(urgency_sort_desc, bool):
        _warn(
            warn,
            f"Invalid settings.urgency_sort_desc in {path}. "
            f"Using default '{DEFAULT_URGENCY_SORT_DESC}'.",
        )
        urgency_sort_desc = DEFAULT_URGENCY_SORT_DESC

    return Config(
        db_path=db_path,
        display_filter=display_filter,
        urgency_sort_desc=urgency_sort_desc,
        min_width=_positive_int(settings, "min_width", MIN_WIDTH, path, warn),
        min_height=_positive_int(settings, "min_height", MIN_HEIGHT, path, warn),
    )


def load_config(root: Path | None = None, warn: Warn | None = None) -> Config:
    config = resolve_config(root, warn=warn)
    if config is None:
        raise ConfigError(f"No config found at {config_path(root)}. Run 'checklist init' first.")
    return config


def save_config(config: Config, root: Path | None = None) -> None:
    path = config_path(root)
    tmp_path = path.with_name(f"{path.name}.tmp")
    payload = yaml.safe_dump(config.to_dict(), sort_keys=False, default_flow_style=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as exc:
        raise ConfigError(f"Unable to write config at {path}: {exc}") from exc


def write_default_config_if_missing(root: Path | None = None, db_path: Path | None = None) -> bool:
    if config_path(root).exists():
        return False
    save_config(Config(db_path=db_path or default_db_path(root)), root)
    return True


def set_db_path(db_path: Path, root: Path | None = None, warn: Warn | None = None) -> str:
    """Point the config at ``db_path``; returns "created" or "updated"."""
    target = db_path.expanduser()
    if not target.exists():
        raise ConfigError(f"A valid path that exists needs to be supplied: {target}")
    target = target.resolve()
    config = resolve_config(root, warn=warn)
    if config is None:
        save_config(Config(db_path=target), root)
        return "created"
    config.db_path = target
    save_config(config, root)
    return "updated"


def make_preferences_saver(root: Path | None = None, warn: Warn | None = None) -> Callable[[StatusFilter, bool], None]:
    """Return a callback persisting the last filter and sort direction."""

    def save(display_filter: StatusFilter, urgency_sort_desc: bool) -> None:
        config = load_config(root, warn=warn)
        config.display_filter = display_filter
        config.urgency_sort_desc = urgency_sort_desc
        save_config(config, root)

    return save


def configure_logging(root: Path | None = None, level: str = "WARNING") -> Path:
    """Send package logs to a rotating file; the terminal belongs to the view."""
    path = log_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("checklist")
    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()
    handler = RotatingFileHandler(path, maxBytes=512_000, backupCount=2, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    return path
