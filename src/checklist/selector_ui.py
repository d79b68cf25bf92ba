"""Yes/no and pick-one questions for the checklist CLI, drawn with InquirerPy."""

from __future__ import annotations

import sys
from typing import Any


class SelectorUnavailableError(RuntimeError):
    """The terminal cannot host an InquirerPy prompt; ask with a plain typer prompt instead."""


def _ensure_tty() -> None:
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise SelectorUnavailableError("stdin and stdout must both be terminals")


def _inquirer():
    try:
        from InquirerPy import inquirer
    except ImportError as exc:  # pragma: no cover - environment dependent
        raise SelectorUnavailableError("InquirerPy could not be imported") from exc
    return inquirer


def _answer(prompt: Any) -> Any:
    try:
        return prompt.execute()
    except (KeyboardInterrupt, EOFError):
        return None
    except Exception as exc:
        raise SelectorUnavailableError(f"prompt failed: {exc}") from exc


def select_one(
    title: str,
    options: list[tuple[str, str]],
    *,
    default_value: str | None = None,
) -> str | None:
    """Ask for one of ``options``, given as ``(value, label)`` pairs.

    Returns the picked value, or None when there is nothing to pick or the
    question is cancelled.
    """
    _ensure_tty()
    if not options:
        return None
    prompt = _inquirer().select(
        message=title,
        choices=[{"name": label, "value": value} for value, label in options],
        default=default_value,
        pointer=">",
        mandatory=False,
        raise_keyboard_interrupt=True,
    )
    result = _answer(prompt)
    return None if result is None else str(result)


def confirm(title: str, *, default: bool = False) -> bool | None:
    _ensure_tty()
    prompt = _inquirer().confirm(
        message=title,
        default=default,
        mandatory=False,
        raise_keyboard_interrupt=True,
    )
    answer = _answer(prompt)
    return None if answer is None else bool(answer)
