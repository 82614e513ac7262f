"""Command-line entry point for maintenance tasks."""

from __future__ import annotations

from pathlib import Path

import click

from .config import BaseConfig
from .errors import DevJournalError
from .logging_config import setup_logging


def _open_context(ctx: click.Context):
    from .context import create_app_context

    config: BaseConfig = ctx.obj["config"]
    try:
        return create_app_context(config)
    except DevJournalError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Override the application data directory.",
)
@click.pass_context
def main(ctx: click.Context, data_dir: Path | None) -> None:
    """DevJournal data maintenance commands."""

    config = BaseConfig()
    if data_dir is not None:
        config.DATA_DIR = data_dir.expanduser().resolve()
        config.DATABASE_URL = f"sqlite:///{config.db_path.as_posix()}"
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    setup_logging(config)


@main.command()
@click.pass_context
def migrate(ctx: click.Context) -> None:
    """Bring the database schema to the latest version."""

    app = _open_context(ctx)
    try:
        rows = app.db.query_many("SELECT version, applied_at FROM schema_migrations ORDER BY version")
        for row in rows:
            click.echo(f"{row['version']:>3}  {row['applied_at']}")
        click.echo(f"Schema at version {rows[-1]['version'] if rows else 0}.")
    finally:
        app.close()


@main.command("export")
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the backup file (defaults to <data-dir>/backups).",
)
@click.pass_context
def export_backup(ctx: click.Context, output: Path | None) -> None:
    """Write every entry, page, task, goal and habit to a JSON backup."""

    from .services.backup import write_backup_file

    app = _open_context(ctx)
    try:
        snapshot = app.backup_service.export_snapshot()
        path = write_backup_file(
            snapshot,
            output or app.config.backup_dir,
            retention=app.config.BACKUP_RETENTION,
        )
    finally:
        app.close()
    click.echo(f"Backup written: {path}")


@main.command("import")
@click.argument("backup_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--replace", is_flag=True, default=False, help="Delete all existing data first.")
@click.pass_context
def import_backup(ctx: click.Context, backup_file: Path, replace: bool) -> None:
    """Import a JSON backup in a single all-or-nothing transaction."""

    from .services.backup import read_backup_file

    app = _open_context(ctx)
    try:
        summary = app.backup_service.import_snapshot(read_backup_file(backup_file), replace_existing=replace)
    except DevJournalError as exc:
        raise click.ClickException(f"Import failed, nothing was changed: {exc}") from exc
    finally:
        app.close()
    click.echo(
        "Imported {entries} entries, {pages} pages, {tasks} tasks, {goals} goals, "
        "{habits} habits, {habit_logs} habit logs.".format(**summary.model_dump())
    )


@main.command()
@click.pass_context
def habits(ctx: click.Context) -> None:
    """Show each habit's current streak and this week's progress."""

    app = _open_context(ctx)
    try:
        rows = app.habit_repo.list_with_logs()
    finally:
        app.close()
    if not rows:
        click.echo("No habits yet.")
        return
    for habit in rows:
        click.echo(
            f"{habit.title}: streak {habit.current_streak}, "
            f"{habit.this_week_count}/{habit.target_per_week} this week"
        )


if __name__ == "__main__":  # pragma: no cover
    main()
