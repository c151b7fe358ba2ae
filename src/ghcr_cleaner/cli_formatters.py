# src/ghcr_cleaner/cli_formatters.py
"""CLI event formatter factories for cleanup output.

Each factory returns a dict mapping event types to handler callables,
suitable for subscribing to an EventBus.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import typer

from ghcr_cleaner.contracts.enums import DeletionStatus
from ghcr_cleaner.contracts.events import (
    CleanupSummary,
    PackageFailed,
    PackageProcessed,
    VersionDeleted,
)
from ghcr_cleaner.core.events import EventBus


def create_console_formatters() -> dict[type, Callable[..., None]]:
    """Create console formatters for human-readable CLI output."""

    def _format_package_processed(event: PackageProcessed) -> None:
        typer.echo(
            f"Processing package: {event.package}... "
            f"(total={event.total}, tagged={event.tagged}, "
            f"untagged={event.untagged}, unwanted={event.unwanted})"
        )
        if event.manifest_failures:
            typer.secho(
                f"  Warning: {event.manifest_failures} manifest(s) could not be fetched",
                fg=typer.colors.YELLOW,
                err=True,
            )

    def _format_package_failed(event: PackageFailed) -> None:
        typer.secho(
            f"Processing package: {event.package}... Error getting versions: {event.error_message}",
            fg=typer.colors.RED,
            err=True,
        )

    def _format_version_deleted(event: VersionDeleted) -> None:
        if event.status == DeletionStatus.DELETED:
            typer.echo(f"Deleting {event.digest}: OK")
        elif event.status == DeletionStatus.DRY_RUN:
            typer.echo(f"Deleting {event.digest}: Dry Run")
        else:
            typer.echo(f"Deleting {event.digest}: Error: {event.error_message}")

    def _format_summary(event: CleanupSummary) -> None:
        typer.echo("")
        typer.echo(f"{event.deletions} Deletions")
        typer.echo(f"{event.errors} Errors")

    return {
        PackageProcessed: _format_package_processed,
        PackageFailed: _format_package_failed,
        VersionDeleted: _format_version_deleted,
        CleanupSummary: _format_summary,
    }


def create_json_formatters() -> dict[type, Callable[..., None]]:
    """Create JSON formatters for structured CLI output (one object per line)."""

    def _format_package_processed_json(event: PackageProcessed) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "package_processed",
                    "package": event.package,
                    "total": event.total,
                    "tagged": event.tagged,
                    "untagged": event.untagged,
                    "unwanted": event.unwanted,
                    "unwanted_by_recency": event.unwanted_by_recency,
                    "unwanted_untagged": event.unwanted_untagged,
                    "manifest_failures": event.manifest_failures,
                }
            )
        )

    def _format_package_failed_json(event: PackageFailed) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "package_failed",
                    "package": event.package,
                    "error": event.error_message,
                }
            ),
            err=True,
        )

    def _format_version_deleted_json(event: VersionDeleted) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "version_deleted",
                    "package": event.package,
                    "version_id": event.version_id,
                    "digest": event.digest,
                    "status": event.status.value,
                    "error": event.error_message,
                }
            )
        )

    def _format_summary_json(event: CleanupSummary) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "cleanup_completed",
                    "deletions": event.deletions,
                    "errors": event.errors,
                    "dry_run": event.dry_run,
                    "duration_seconds": event.duration_seconds,
                    "exit_code": event.exit_code,
                }
            )
        )

    return {
        PackageProcessed: _format_package_processed_json,
        PackageFailed: _format_package_failed_json,
        VersionDeleted: _format_version_deleted_json,
        CleanupSummary: _format_summary_json,
    }


def subscribe_formatters(
    event_bus: EventBus,
    formatters: dict[type, Callable[..., None]],
) -> None:
    """Subscribe all formatters to the event bus.

    Args:
        event_bus: The event bus to subscribe handlers to.
        formatters: Mapping from event type to handler callable.
    """
    for event_type, handler in formatters.items():
        event_bus.subscribe(event_type, handler)
