"""Builds the rich Text shown inside each widget of the terminal view.

Every function here reads a RenderPlan and returns content sized for the
inner area of one pane or popup; the textual app only places widgets and
assigns what these return.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from .coordinator import ListRow, PromptPlan, RenderPlan, wrap_lines
from .models import Status
from .theme import Theme

POPUP_MAX_WIDTH = 60
SCROLLBAR_THUMB = "█"
STATUS_MARKS = {
    Status.OPEN: " ",
    Status.WORKING: "~",
    Status.PAUSED: "=",
    Status.COMPLETED: "x",
}


@dataclass(frozen=True, slots=True)
class Popup:
    title: str
    body: Text
    style: str
    border_style: str


def _fit(text: str, width: int) -> str:
    width = max(width, 0)
    return text[:width].ljust(width)


def _join(lines: list[Text]) -> Text:
    return Text("\n", no_wrap=True, overflow="crop").join(lines)


def too_small_body(plan: RenderPlan, theme: Theme) -> Text:
    body = Text(justify="center")
    body.append("Terminal too small", style=theme.error)
    body.append(f"\n{plan.width}x{plan.height}\nEnlarge the window", style=theme.normal_row)
    return body


def list_title(plan: RenderPlan) -> str:
    start, end, total = plan.indicator
    return f"Tasks {start}-{end} of {total}" if total else "Tasks (none)"


def _row(row: ListRow, width: int, theme: Theme) -> Text:
    symbol = theme.highlight_symbol if row.selected else " " * len(theme.highlight_symbol)
    if row.selected:
        base = theme.selected_row
    else:
        base = theme.alt_row if row.index % 2 else theme.normal_row
    line = Text(_fit(f"{symbol}{row.urgency.value[0]} {STATUS_MARKS[row.status]} {row.title}", width), style=base)
    if not row.selected:
        marker = len(symbol)
        line.stylize(theme.urgency_style(row.urgency), marker, marker + 1)
        line.stylize(theme.status_style(row.status), marker + 2, marker + 3)
    return line


def list_body(plan: RenderPlan, theme: Theme, width: int, height: int) -> Text:
    """Visible rows, padded to ``width``, with a scrollbar in the last column."""
    if not plan.rows:
        return Text(_fit("No tasks match.", width), style=theme.normal_row)
    lines = [_row(row, width, theme) for row in plan.rows[:height]]

    start, _, total = plan.indicator
    if total > height and width > 1:
        lines.extend(Text(" " * width) for _ in range(height - len(lines)))
        thumb = max(1, height * height // total)
        position = min(height * (start - 1) // total, height - thumb)
        for idx in range(position, position + thumb):
            lines[idx] = lines[idx][: width - 1] + Text(SCROLLBAR_THUMB, style=theme.scrollbar)
    return _join(lines)


def detail_body(plan: RenderPlan, theme: Theme, width: int, height: int) -> Text:
    wrapped = wrap_lines(plan.detail_lines, width)
    scroll = min(max(plan.detail_scroll, 0), max(len(wrapped) - height, 0))
    return _join([Text(line, style=theme.normal_row) for line in wrapped[scroll : scroll + height]])


def keys_body(plan: RenderPlan, theme: Theme, width: int) -> Text:
    return _join([Text(line, style=theme.normal_row) for line in wrap_lines(plan.key_lines, width)])


def status_body(plan: RenderPlan, theme: Theme) -> Text:
    return Text(_fit(plan.status_line, plan.width), style=theme.status_bar, no_wrap=True)


def popup_width(plan: RenderPlan) -> int:
    return max(min(POPUP_MAX_WIDTH, plan.width - 2), 2)


def _editor_line(prompt: PromptPlan, width: int, theme: Theme) -> Text:
    start = max(0, prompt.cursor - width + 1)
    line = Text(_fit(prompt.buffer[start:], width), style=theme.popup)
    if prompt.selection is not None:
        lo = max(prompt.selection[0] - start, 0)
        hi = min(prompt.selection[1] - start, width)
        if hi > lo:
            line.stylize(theme.text_highlight, lo, hi)
    cursor = prompt.cursor - start
    if cursor < width:
        line.stylize(theme.cursor, cursor, cursor + 1)
    return line


def _tag_line(prompt: PromptPlan, theme: Theme) -> Text:
    line = Text("Tags: ", style=theme.popup)
    if not prompt.tags:
        line.append("-")
    for idx, tag in enumerate(prompt.tags):
        if idx:
            line.append("  ")
        line.append(tag, style=theme.text_highlight if idx == prompt.tag_cursor else None)
    return line


def prompt_body(prompt: PromptPlan, theme: Theme, width: int) -> Text:
    lines: list[Text] = []
    if prompt.kind == "picker":
        for idx, option in enumerate(prompt.options):
            style = theme.selected_row if idx == prompt.highlight else theme.popup
            lines.append(Text(_fit(f"{idx + 1}  {option}", width), style=style))
    elif prompt.kind == "tags":
        lines.extend([_tag_line(prompt, theme), Text(""), _editor_line(prompt, width, theme)])
    elif prompt.kind == "text":
        lines.append(_editor_line(prompt, width, theme))
        if prompt.lines:
            lines.append(Text(""))
            lines.extend(Text(line, style=theme.popup) for line in wrap_lines(prompt.lines, width))
    else:
        lines.extend(Text(line, style=theme.popup) for line in wrap_lines(prompt.lines, width))
    if prompt.error:
        lines.extend([Text(""), Text(prompt.error, style=theme.error)])
    return _join(lines)


def help_body(plan: RenderPlan, theme: Theme) -> Text:
    lines = plan.help_lines or ()
    visible = max(plan.height - 4, 1)
    shown = lines[plan.help_scroll : plan.help_scroll + visible]
    return _join([Text(line, style=theme.popup) for line in shown])


def message_body(message: str, theme: Theme, width: int) -> Text:
    lines = wrap_lines((message, "", "Press any key to continue."), width)
    return _join([Text(line, style=theme.message) for line in lines])


def popup(plan: RenderPlan, theme: Theme) -> Popup | None:
    """The overlay to show on top of the panes; a pending message wins."""
    inner = popup_width(plan) - 2
    if plan.message is not None:
        return Popup("Error", message_body(plan.message, theme, inner), theme.message, theme.message)
    if plan.prompt is not None:
        return Popup(plan.prompt.title, prompt_body(plan.prompt, theme, inner), theme.popup, theme.popup_border)
    if plan.help_lines is not None:
        return Popup("Help", help_body(plan, theme), theme.popup, theme.popup_border)
    return None
