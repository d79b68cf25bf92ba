"""Named style slots for the terminal view, loadable from theme.yaml."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable

from rich.errors import StyleSyntaxError
from rich.style import Style
import yaml

from .models import ConfigError, Status, Urgency


@dataclass(frozen=True, slots=True)
class Theme:
    """Each slot holds a ``rich`` style string, e.g. ``"bold white on blue"``."""

    normal_row: str = ""
    alt_row: str = "on grey11"
    selected_row: str = "bold black on cyan"
    status_bar: str = "black on grey70"
    pane_border: str = "grey50"
    pane_title: str = "bold cyan"
    scrollbar: str = "cyan"
    popup: str = "white on grey15"
    popup_border: str = "bold yellow"
    text_highlight: str = "black on yellow"
    cursor: str = "reverse"
    error: str = "bold red"
    message: str = "bold white on red"
    urgency_low: str = "dim"
    urgency_medium: str = "cyan"
    urgency_high: str = "bold yellow"
    urgency_critical: str = "bold red"
    status_open: str = "magenta"
    status_working: str = "cyan"
    status_paused: str = "yellow"
    status_completed: str = "green"
    highlight_symbol: str = "> "

    def urgency_style(self, urgency: Urgency) -> str:
        return getattr(self, f"urgency_{urgency.value.lower()}")

    def status_style(self, status: Status) -> str:
        return getattr(self, f"status_{status.value.lower()}")

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


THEME_KEYS = {item.name for item in fields(Theme)}
PLAIN_KEYS = {"highlight_symbol"}


def load_theme(path: Path, warn: Callable[[str], None] | None = None) -> Theme:
    """Read ``path`` over the defaults; problems warn and keep the default slot."""

    def _warn(message: str) -> None:
        if warn is not None:
            warn(message)

    if not path.exists():
        return Theme()
    try:
        payload: Any = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        _warn(f"Unable to parse theme at {path}. Using the default theme.")
        return Theme()
    if not isinstance(payload, dict):
        _warn(f"Invalid theme format at {path}. Using the default theme.")
        return Theme()

    overrides: dict[str, str] = {}
    for key, value in payload.items():
        if key not in THEME_KEYS:
            _warn(f"Unsupported theme key '{key}' in {path}. Ignoring.")
            continue
        if not isinstance(value, str):
            _warn(f"Invalid theme value for '{key}' in {path}. Using default.")
            continue
        if key not in PLAIN_KEYS:
            try:
                Style.parse(value)
            except StyleSyntaxError:
                _warn(f"Invalid style '{value}' for '{key}' in {path}. Using default.")
                continue
        overrides[key] = value
    return replace(Theme(), **overrides)


def write_default_theme_if_missing(path: Path) -> bool:
    if path.exists():
        return False
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(Theme().to_dict(), sort_keys=False, default_flow_style=False),
            encoding="utf-8",
        )
    except OSError as exc:
        raise ConfigError(f"Unable to write theme at {path}: {exc}") from exc
    return True
