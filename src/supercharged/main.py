"""Main entry point for Supercharged Tasks.

Without a subcommand the interactive board starts; the subcommands give
scriptable access to the same operations. Every mutating subcommand loads
the snapshot, applies one change and saves it again.
"""
from datetime import datetime
from pathlib import Path
from typing import Optional

import click

from .board import Board
from .cli import CLI, DATETIME_FORMATS
from .config import Settings, load_settings
from .csv_io import export_csv, import_csv, read_csv_file, write_csv_file
from .errors import SuperchargedError
from .models import TaskDraft, now_local
from .storage import Storage


class AppContext:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.storage = Storage(settings.data_file)
        loaded = self.storage.load_tasks()
        if loaded.notice:
            click.echo(loaded.notice, err=True)
        self.board = Board(loaded.tasks)

    def save(self) -> None:
        try:
            self.storage.save_tasks(self.board.all_tasks())
        except SuperchargedError as exc:
            click.echo(f"Warning: {exc}", err=True)


pass_app = click.make_pass_decorator(AppContext)


def _require(app: AppContext, number: int):
    task = app.board.task_at(number, show_completed=True)
    if task is None:
        raise click.BadParameter(f"no task #{number} on the board", param_hint="N")
    return task


@click.group(invoke_without_command=True)
@click.option('--data-file', type=click.Path(dir_okay=False, path_type=Path),
              help="JSON snapshot file (default: SUPERCHARGED_DATA_FILE or data/tasks.json).")
@click.pass_context
def main(ctx: click.Context, data_file: Optional[Path]) -> None:
    """Prioritize tasks by value per hour and earn bonus points for finishing on time."""
    app = AppContext(load_settings(data_file))
    ctx.obj = app
    if ctx.invoked_subcommand is None:
        CLI(app.board, app.storage, app.settings).run()


@main.command('list')
@click.option('--hide-completed', is_flag=True, help="Only show pending tasks.")
@pass_app
def list_tasks(app: AppContext, hide_completed: bool) -> None:
    """Print the ranked board."""
    for line in app.board.render(now_local(), show_completed=not hide_completed):
        click.echo(line)


@main.command('add')
@click.argument('text', nargs=-1, required=True)
@click.option('-i', '--importance', type=click.IntRange(1, 5), default=3, show_default=True)
@click.option('-u', '--urgency', type=click.IntRange(1, 5), default=3, show_default=True)
@click.option('-h', '--hours', type=float, default=1.0, show_default=True, help="Estimated time in hours.")
@click.option('--at', 'scheduled', type=click.DateTime(DATETIME_FORMATS), default=None,
              help="Scheduled start (local time); defaults to now.")
@pass_app
def add_task(app: AppContext, text, importance: int, urgency: int, hours: float,
             scheduled: Optional[datetime]) -> None:
    """Add a task."""
    now = now_local()
    draft = TaskDraft(text=' '.join(text), importance=importance, urgency=urgency,
                      estimated_time=hours, scheduled_at=scheduled.astimezone() if scheduled else now)
    try:
        task = app.board.add_task(draft, now)
    except SuperchargedError as exc:
        raise click.ClickException(str(exc))
    app.save()
    click.echo(f'Task "{task.text}" added.')


@main.command('toggle')
@click.argument('number', metavar='N', type=int)
@pass_app
def toggle_task(app: AppContext, number: int) -> None:
    """Complete task N, or move a completed task back to pending."""
    task = _require(app, number)
    click.echo(app.board.toggle_complete(task.id, now_local()))
    app.save()


@main.command('rm')
@click.argument('number', metavar='N', type=int)
@pass_app
def remove_task(app: AppContext, number: int) -> None:
    """Remove task N."""
    task = _require(app, number)
    click.echo(app.board.delete_task(task.id))
    app.save()


@main.command('clear')
@pass_app
def clear_completed(app: AppContext) -> None:
    """Remove all completed tasks."""
    click.echo(app.board.clear_completed())
    app.save()


@main.command('stats')
@pass_app
def stats(app: AppContext) -> None:
    """Print pending value and value achieved today."""
    summary = app.board.summary(now_local())
    click.echo(f"Pending tasks: {summary.pending_count}")
    click.echo(f"Completed tasks: {summary.completed_count}")
    click.echo(f"Total pending value: {summary.total_pending_value}")
    click.echo(f"Value achieved today: {summary.value_achieved_today}")


@main.command('export')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path),
                default='supercharged_tasks_export.csv')
@pass_app
def export_tasks(app: AppContext, path: Path) -> None:
    """Export every task to a CSV file."""
    try:
        write_csv_file(path, export_csv(app.board.all_tasks()))
    except SuperchargedError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Tasks exported successfully to {path}!")


@main.command('import')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@click.confirmation_option(prompt="Importing replaces all current tasks. Continue?")
@pass_app
def import_tasks(app: AppContext, path: Path) -> None:
    """Replace all tasks with the contents of a CSV file."""
    try:
        result = import_csv(read_csv_file(path), now_local())
    except SuperchargedError as exc:
        raise click.ClickException(str(exc))
    for warning in result.warnings:
        click.echo(warning, err=True)
    app.board.replace_all(result.tasks)
    app.save()
    click.echo(f"{len(result.tasks)} tasks imported successfully!")


if __name__ == "__main__":
    main()
