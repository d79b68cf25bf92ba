"""CLI entrypoint for checklist."""

from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import Annotated

import click
import typer

from . import render, storage
from .coordinator import ViewCoordinator
from .layout import LayoutMode
from .modal import EMPTY_TITLE_ERROR
from .models import (
    VALID_FILTERS,
    VALID_STATUSES,
    VALID_URGENCIES,
    Status,
    StatusFilter,
    Task,
    TaskError,
    TaskValidationError,
    Urgency,
)
from .projection import SortOrder, ViewFilter, project
from .selector_ui import SelectorUnavailableError, confirm, select_one
from .store import TaskStore
from .theme import load_theme, write_default_theme_if_missing
from .tui import run_view

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LAYOUT_CHOICES = {"horizontal": LayoutMode.HORIZONTAL, "vertical": LayoutMode.VERTICAL}

LogLevelOption = Annotated[
    str,
    typer.Option(
        "--log-level",
        help="Level for the log file in the config directory",
        click_type=click.Choice(LOG_LEVELS, case_sensitive=False),
    ),
]

app = typer.Typer(help="Terminal task tracker with an adaptive split-pane view")


def _can_interact() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def _can_render_rich_list_output() -> bool:
    return sys.stdout.isatty()


def _print_rich(renderable) -> None:
    from rich.console import Console

    Console().print(renderable)


def _warn_config(message: str) -> None:
    typer.echo(f"Warning: {message}", err=True)


def _run_and_handle(fn) -> None:
    try:
        fn()
    except TaskError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _open_store() -> tuple[TaskStore, storage.Config]:
    config = storage.load_config(warn=_warn_config)
    return TaskStore(config.db_path), config


def _launch_view(pinned: LayoutMode | None, log_level: str) -> None:
    store, config = _open_store()
    log_file = storage.configure_logging(level=log_level)
    logger.info("starting view on %s (log %s)", config.db_path, log_file)
    theme = load_theme(storage.theme_path(), warn=_warn_config)
    coordinator = ViewCoordinator(
        store,
        view_filter=ViewFilter(status=config.display_filter),
        sort_order=SortOrder(descending=config.urgency_sort_desc),
        pinned=pinned,
        min_width=config.min_width,
        min_height=config.min_height,
        save_preferences=storage.make_preferences_saver(warn=logger.warning),
    )
    run_view(coordinator, theme)


def _choose_layout_interactively() -> LayoutMode | None:
    options = [("auto", "Auto (follow window shape)"), ("horizontal", "Horizontal"), ("vertical", "Vertical")]
    try:
        choice = select_one("Layout", options, default_value="auto")
    except SelectorUnavailableError:
        choice = typer.prompt(
            "Layout",
            default="auto",
            type=click.Choice([value for value, _ in options], case_sensitive=False),
        )
    if choice is None:
        raise typer.Exit(code=0)
    return LAYOUT_CHOICES.get(choice.lower())


@app.callback(invoke_without_command=True)
def root_callback(ctx: typer.Context, log_level: LogLevelOption = "WARNING") -> None:
    """Open the task view when no command is provided."""
    if ctx.invoked_subcommand is not None:
        return
    _run_and_handle(lambda: _launch_view(None, log_level))


@app.command("display")
def display_cmd(
    view: Annotated[
        str | None,
        typer.Option(
            "--view",
            "-v",
            help="Pin the layout instead of following the window shape",
            click_type=click.Choice(sorted(LAYOUT_CHOICES), case_sensitive=False),
        ),
    ] = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Open the task view, optionally with a pinned layout."""

    def _inner() -> None:
        if view is not None:
            pinned = LAYOUT_CHOICES[view.lower()]
        elif _can_interact():
            pinned = _choose_layout_interactively()
        else:
            pinned = None
        _launch_view(pinned, log_level)

    _run_and_handle(_inner)


@app.command("where")
def where_cmd(
    database: Annotated[bool, typer.Option("--database", "-d", help="Show the task store path")] = False,
    config: Annotated[bool, typer.Option("--config", "-c", help="Show the config file path")] = False,
    theme: Annotated[bool, typer.Option("--theme", "-t", help="Show the theme file path")] = False,
) -> None:
    """Print where checklist keeps its files."""

    def _inner() -> None:
        show_all = not (database or config or theme)
        if database or show_all:
            resolved = storage.resolve_config(warn=_warn_config)
            db_path = resolved.db_path if resolved is not None else storage.default_db_path()
            typer.echo(f"database: {db_path}")
        if config or show_all:
            typer.echo(f"config: {storage.config_path()}")
        if theme or show_all:
            typer.echo(f"theme: {storage.theme_path()}")

    _run_and_handle(_inner)


@app.command("init")
def init_cmd(
    set_path: Annotated[
        Path | None,
        typer.Option("--set", help="Point the config at an existing task store file"),
    ] = None,
) -> None:
    """Create the config, an empty task store and the default theme."""

    def _inner() -> None:
        if set_path is not None:
            action = storage.set_db_path(set_path, warn=_warn_config)
            typer.echo(f"Config {action}: database set to {set_path.expanduser().resolve()}")
            return

        if storage.write_default_config_if_missing():
            typer.echo(f"Created config: {storage.config_path()}")
        else:
            typer.echo(f"Config already exists: {storage.config_path()}")

        config = storage.load_config(warn=_warn_config)
        if TaskStore(config.db_path).ensure():
            typer.echo(f"Created task store: {config.db_path}")
        else:
            typer.echo(f"Task store already exists: {config.db_path}")

        if write_default_theme_if_missing(storage.theme_path()):
            typer.echo(f"Created theme: {storage.theme_path()}")

    _run_and_handle(_inner)


@app.command("import")
def import_cmd(
    path: Annotated[Path, typer.Argument(help="Task store file to import from")],
) -> None:
    """Copy tasks from another task store; tasks whose id already exists are skipped."""

    def _inner() -> None:
        store, _ = _open_store()
        count = store.import_from(path.expanduser())
        typer.echo(f"Imported {count} task(s) from {path}")

    _run_and_handle(_inner)


@app.command("wipe")
def wipe_cmd(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
) -> None:
    """Delete every task in the store."""

    def _inner() -> None:
        store, config = _open_store()
        if not yes:
            question = f"Delete all tasks in {config.db_path}?"
            try:
                approved = confirm(question)
            except SelectorUnavailableError:
                approved = typer.confirm(question, default=False)
            if not approved:
                typer.echo("Aborted.")
                return
        store.wipe()
        typer.echo("All tasks deleted.")

    _run_and_handle(_inner)


@app.command("add")
def add_cmd(
    name: Annotated[str, typer.Argument(help="Task title")],
    description: Annotated[str, typer.Option("--description", "-d")] = "",
    urgency: Annotated[
        str,
        typer.Option("--urgency", "-u", click_type=click.Choice(VALID_URGENCIES, case_sensitive=False)),
    ] = Urgency.LOW.value,
    status: Annotated[
        str,
        typer.Option("--status", "-s", click_type=click.Choice(VALID_STATUSES, case_sensitive=False)),
    ] = Status.OPEN.value,
    tag: Annotated[list[str], typer.Option("--tag", "-t", help="Can be repeated")] = [],
) -> None:
    """Add a task without opening the view."""

    def _inner() -> None:
        title = name.strip()
        if not title:
            raise TaskValidationError(EMPTY_TITLE_ERROR)
        store, _ = _open_store()
        task = Task.new(
            title,
            description=description,
            urgency=Urgency(urgency),
            status=Status(status),
            tags=tag,
        )
        task_id = store.create(task)
        typer.echo(f"Created task: {title} ({task_id})")

    _run_and_handle(_inner)


@app.command("list")
def list_cmd(
    display: Annotated[
        str,
        typer.Option(
            "--display",
            "-d",
            help="Status filter",
            click_type=click.Choice(VALID_FILTERS, case_sensitive=False),
        ),
    ] = StatusFilter.NOT_COMPLETED.value,
    tag: Annotated[
        list[str],
        typer.Option("--tag", "-t", help="Only tasks carrying every given tag; can be repeated"),
    ] = [],
    ascending: Annotated[bool, typer.Option("--asc", help="Least urgent first")] = False,
    as_json: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    """List tasks sorted by urgency."""

    def _inner() -> None:
        store, _ = _open_store()
        tasks = project(
            store.list(),
            ViewFilter(status=StatusFilter(display), tags=frozenset(tag)),
            SortOrder(descending=not ascending),
        )
        if as_json:
            typer.echo(render.render_task_list_json(tasks))
        elif _can_render_rich_list_output():
            _print_rich(render.render_task_list_rich(tasks))
        else:
            typer.echo(render.render_task_list_plain(tasks))

    _run_and_handle(_inner)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
