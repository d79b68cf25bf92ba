"""Textual application that hosts the checklist view."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from ..coordinator import ViewCoordinator
from ..layout import Rect
from ..modal import KeyEvent
from ..models import TaskError
from ..panes import (
    detail_body,
    keys_body,
    list_body,
    list_title,
    popup,
    popup_width,
    status_body,
    too_small_body,
)
from ..theme import Theme

if TYPE_CHECKING:
    from textual.color import Color

TICK_SECONDS = 0.5


def is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def to_key_event(key: str, character: str | None) -> KeyEvent:
    """Translate a textual key press; only printable characters count as input."""
    char = character if character and len(character) == 1 and character.isprintable() else None
    return KeyEvent(key=key, char=char)


def theme_color(style: str, background: bool = False) -> Color | None:
    """Foreground (or background) of a rich style string as a textual Color."""
    from rich.style import Style
    from textual.color import Color

    parsed = Style.parse(style)
    rich_color = parsed.bgcolor if background else parsed.color
    if rich_color is None:
        return None
    return Color.from_rich_color(rich_color)


def run_view(coordinator: ViewCoordinator, theme: Theme | None = None) -> None:
    if not is_interactive():
        raise TaskError("The checklist view needs an interactive terminal.")

    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Container
    from textual.widget import Widget
    from textual.widgets import Static

    active_theme = theme or Theme()

    def _surface(widget: Widget, style: str, border_style: str) -> None:
        background = theme_color(style, background=True)
        if background is not None:
            widget.styles.background = background
        border = theme_color(border_style)
        if border is not None:
            widget.styles.border = ("round", border)

    class ChecklistApp(App[None]):
        CSS = """
        Screen {
            layers: base overlay;
            overflow: hidden;
        }
        #panes {
            layout: vertical;
        }
        .pane {
            border: round $surface-lighten-2;
            border-title-align: left;
            text-wrap: nowrap;
            overflow: hidden;
        }
        #status {
            dock: bottom;
            height: 1;
        }
        #too-small {
            width: 100%;
            height: 100%;
            content-align: center middle;
            display: none;
        }
        #overlay {
            layer: overlay;
            width: 100%;
            height: 100%;
            align: center middle;
            display: none;
        }
        #popup {
            border: round $accent;
            border-title-align: left;
            background: $panel;
            height: auto;
            max-height: 100%;
        }
        """
        ENABLE_COMMAND_PALETTE = False

        def compose(self) -> ComposeResult:
            with Container(id="panes"):
                yield Static(id="list", classes="pane")
                yield Static(id="detail", classes="pane")
                yield Static(id="keys", classes="pane")
            yield Static(id="status")
            yield Static(id="too-small")
            with Container(id="overlay"):
                yield Static(id="popup")

        def on_mount(self) -> None:
            title_color = theme_color(active_theme.pane_title)
            for pane in self.query(".pane"):
                _surface(pane, active_theme.normal_row, active_theme.pane_border)
                if title_color is not None:
                    pane.styles.border_title_color = title_color
            self.query_one("#detail", Static).border_title = "Details"
            self.query_one("#keys", Static).border_title = "Keys"
            coordinator.resize(self.size.width, self.size.height)
            self.set_interval(TICK_SECONDS, self._tick)
            self._redraw()

        def _place(self, widget_id: str, rect: Rect) -> Static:
            widget = self.query_one(f"#{widget_id}", Static)
            widget.display = rect.width >= 2 and rect.height >= 2
            widget.styles.width = rect.width
            widget.styles.height = rect.height
            return widget

        def _redraw(self) -> None:
            plan = coordinator.plan()
            panes = self.query_one("#panes", Container)
            status = self.query_one("#status", Static)
            too_small = self.query_one("#too-small", Static)
            overlay = self.query_one("#overlay", Container)

            if plan.too_small or plan.panes is None or plan.layout is None:
                panes.display = status.display = overlay.display = False
                too_small.display = True
                too_small.update(too_small_body(plan, active_theme))
                return
            too_small.display = False
            panes.display = status.display = True

            rects = plan.panes
            panes.styles.layout = "horizontal" if plan.layout.is_horizontal else "vertical"
            inner = rects.list.inner
            task_list = self._place("list", rects.list)
            task_list.border_title = list_title(plan)
            task_list.update(list_body(plan, active_theme, inner.width, inner.height))
            inner = rects.detail.inner
            self._place("detail", rects.detail).update(
                detail_body(plan, active_theme, inner.width, inner.height)
            )
            self._place("keys", rects.keys).update(keys_body(plan, active_theme, rects.keys.inner.width))
            status.update(status_body(plan, active_theme))

            shown = popup(plan, active_theme)
            overlay.display = shown is not None
            if shown is None:
                return
            box = self.query_one("#popup", Static)
            box.styles.width = popup_width(plan)
            box.border_title = shown.title
            _surface(box, shown.style, shown.border_style)
            box.update(shown.body)

        def _tick(self) -> None:
            if coordinator.tick(self.size.width, self.size.height):
                self._redraw()

        def on_resize(self, event: events.Resize) -> None:
            coordinator.resize(event.size.width, event.size.height)
            self._redraw()

        def on_key(self, event: events.Key) -> None:
            event.prevent_default()
            event.stop()
            coordinator.handle(to_key_event(event.key, event.character))
            if coordinator.should_exit:
                self.exit()
                return
            self._redraw()

    ChecklistApp().run()
