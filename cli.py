#!/usr/bin/env python3
"""
iMessage Export & Rename Tool - CLI Interface

Runs imessage-exporter, renames the exported conversation files after the
matching contacts and sets each file's timestamps to its message date range.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

import config as defaults
from core.app_config import ExportConfig
from core.pipeline import PipelineManager, StageResult
from core.pipeline.stages import ContactRenameStage, ExportStage, TimestampStage
from utils.logging_setup import setup_logging

SEPARATOR = "=" * 50


class ExportCommand(click.Command):
    """Click command that exits with status 1 on usage errors."""

    def main(self, *args, standalone_mode: bool = True, **kwargs):
        try:
            rv = super().main(*args, standalone_mode=False, **kwargs)
        except click.ClickException as e:
            if not standalone_mode:
                raise
            e.show()
            sys.exit(1)
        except click.Abort:
            if not standalone_mode:
                raise
            click.echo("Aborted!", err=True)
            sys.exit(1)

        if not standalone_mode:
            return rv
        sys.exit(rv if isinstance(rv, int) else 0)


def format_validation_error(error: ValidationError) -> str:
    """One line per pydantic error, without the pydantic boilerplate."""
    messages = []
    for item in error.errors():
        message = item.get("msg", "")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        location = ".".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{location}: {message}" if location else message)
    return "\n".join(messages)


def build_config(overrides: Dict[str, Any]) -> ExportConfig:
    """
    Create the run configuration from command line overrides.

    Options that were not given on the command line are left to the
    environment, the .env file and the defaults.

    Raises:
        click.BadParameter: If the resulting configuration is invalid
    """
    provided = {key: value for key, value in overrides.items() if value is not None}
    try:
        return ExportConfig(**provided)
    except ValidationError as e:
        raise click.BadParameter(format_validation_error(e)) from e


def build_pipeline(export_config: ExportConfig) -> PipelineManager:
    """Register the stages enabled by the configuration."""
    manager = PipelineManager(export_dir=export_config.output_dir)
    manager.register_stage(ExportStage())
    if export_config.rename_files:
        manager.register_stage(ContactRenameStage())
    manager.register_stage(TimestampStage())
    return manager


def report_export(result: StageResult, export_config: ExportConfig) -> None:
    if result.metadata.get("skipped"):
        if export_config.dry_run:
            click.echo("🔍 DRY RUN: Would run iMessage export with current settings")
            click.echo(f"   Command: {' '.join(result.metadata.get('command', []))}")
        else:
            click.echo(f"⏭️  Skipping export, using existing files in {export_config.output_dir}")
        return

    output = result.metadata.get("output", "")
    if output:
        click.echo("iMessage Exporter output:")
        click.echo(output.rstrip("\n"))

    if result.success:
        click.echo("✓ iMessage export completed successfully")
    else:
        for error in result.errors:
            click.echo(f"✗ {error}")
        click.echo("❌ Export failed. Exiting.")


def report_rename(result: Optional[StageResult], export_config: ExportConfig) -> None:
    click.echo("\n" + SEPARATOR)
    if result is None:
        click.echo("📝 Skipping file renaming (--no-rename specified)")
        return

    if result.metadata.get("directory_missing"):
        for error in result.errors:
            click.echo(f"❌ {error}")
        return

    if not result.metadata.get("contacts_loaded"):
        click.echo("⚠️  No contacts found or contacts access denied. Files will keep original names.")
        return

    summary = result.metadata["summary"]
    if export_config.dry_run:
        click.echo(f"Would rename {summary.renamed} files")
        for old_name, new_name in summary.renames:
            click.echo(f"  {old_name} -> {new_name}")
    else:
        click.echo(f"Renamed {summary.renamed} files")
    if summary.unmatched:
        click.echo(f"{summary.unmatched} files had no matching contacts")
    if summary.failed:
        click.echo(f"❌ {summary.failed} files could not be renamed")


def report_timestamps(result: StageResult, export_config: ExportConfig) -> None:
    click.echo("\n" + SEPARATOR)
    if not result.success or result.metadata.get("directory_missing"):
        for error in result.errors:
            click.echo(f"❌ {error}")
        return

    summary = result.metadata["summary"]
    if export_config.dry_run:
        click.echo(f"🔍 DRY RUN: Would update timestamps for {summary.updated} files")
    else:
        click.echo(f"✅ Updated timestamps for {summary.updated} files")
    if summary.no_dates:
        click.echo(f"⚠️  {summary.no_dates} files had no recognizable message dates")
    if summary.failed:
        click.echo(f"❌ {summary.failed} files could not be updated")


def report_stage(stage_name: str, result: StageResult, export_config: ExportConfig) -> None:
    """Print the report of a stage as soon as it finishes."""
    if stage_name == "export":
        report_export(result, export_config)
        if result.success and not export_config.rename_files:
            report_rename(None, export_config)
    elif stage_name == "contact_rename":
        report_rename(result, export_config)
    elif stage_name == "timestamps":
        report_timestamps(result, export_config)


@click.command(cls=ExportCommand, context_settings=dict(help_option_names=['-h', '--help']))
@click.option(
    '-o', '--output', 'output_dir',
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    help=f"Output directory (default: {defaults.DEFAULT_OUTPUT_DIR})"
)
@click.option(
    '-f', '--format', 'export_format',
    type=click.Choice(defaults.EXPORT_FORMATS),
    help=f"Export format: txt or html (default: {defaults.DEFAULT_EXPORT_FORMAT})"
)
@click.option(
    '-c', '--copy-method', 'copy_method',
    type=click.Choice(defaults.COPY_METHODS),
    help=f"Attachment copy method (default: {defaults.DEFAULT_COPY_METHOD})"
)
@click.option(
    '-p', '--db-path', 'db_path',
    type=click.Path(path_type=Path),
    help="Custom iMessage database path"
)
@click.option(
    '-r', '--attachment-root', 'attachment_root',
    type=click.Path(path_type=Path),
    help="Custom attachment root path"
)
@click.option('-s', '--start-date', 'start_date', help="Start date (YYYY-MM-DD)")
@click.option('-e', '--end-date', 'end_date', help="End date (YYYY-MM-DD)")
@click.option('--no-rename', is_flag=True, help="Skip contact name renaming")
@click.option('--dry-run', is_flag=True, help="Show what would be done without making changes")
@click.option('--verbose', is_flag=True, help="Show detailed output (INFO level)")
@click.option('--debug', is_flag=True, help="Enable debug logging (DEBUG level)")
@click.option(
    '--contacts-file',
    type=click.Path(dir_okay=False, path_type=Path),
    help="Read contacts from a vCard file instead of the macOS AddressBook"
)
@click.option('--skip-export', is_flag=True, help="Post-process an existing export without running imessage-exporter")
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the log to this file"
)
@click.pass_context
def cli(ctx, output_dir, export_format, copy_method, db_path, attachment_root,
        start_date, end_date, no_rename, dry_run, verbose, debug, contacts_file,
        skip_export, log_file):
    """Export iMessage conversations, rename them after contacts and date them.

    \b
    Examples:
      imessage-export
      imessage-export -f html -c basic -o ~/Documents/messages
      imessage-export --dry-run --verbose
      imessage-export -s 2023-01-01 -e 2023-12-31
    """
    export_config = build_config({
        "output_dir": output_dir,
        "export_format": export_format,
        "copy_method": copy_method,
        "db_path": db_path,
        "attachment_root": attachment_root,
        "start_date": start_date,
        "end_date": end_date,
        "rename_files": False if no_rename else None,
        "dry_run": dry_run or None,
        "verbose": verbose or None,
        "debug": debug or None,
        "contacts_file": contacts_file,
        "skip_export": skip_export or None,
        "log_file": log_file,
    })

    setup_logging(export_config.effective_log_level, log_file=export_config.log_file)
    logger = logging.getLogger(__name__)
    logger.debug(f"Configuration: {export_config.to_dict()}")

    click.echo("🚀 iMessage Complete Export & Rename Tool")
    click.echo(SEPARATOR)

    if export_config.dry_run:
        click.echo("⚠️  DRY RUN MODE - No files will be created or modified")
        click.echo("")

    if export_config.is_verbose:
        click.echo("Configuration:")
        for line in export_config.describe():
            click.echo(line)
        click.echo("")

    manager = build_pipeline(export_config)
    results = manager.execute_pipeline(
        config=export_config,
        on_stage_complete=lambda stage_name, result: report_stage(stage_name, result, export_config),
    )
    if not results["export"].success:
        ctx.exit(1)

    click.echo("\n" + SEPARATOR)
    if any(not result.success for result in results.values()):
        click.echo("❌ Export and rename finished with errors")
        ctx.exit(1)

    if export_config.dry_run:
        click.echo("✅ Dry run completed. Use without --dry-run to actually export and rename files.")
    else:
        click.echo("✅ Export and rename completed!")
        click.echo(f"📁 Files available at: {export_config.output_dir}")


def main():
    """Console script entry point."""
    cli()


if __name__ == '__main__':
    main()
