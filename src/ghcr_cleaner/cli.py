# src/ghcr_cleaner/cli.py
"""ghcr-cleaner Command Line Interface.

Entry point for the ghcr-cleaner CLI tool.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import typer

from ghcr_cleaner import __version__
from ghcr_cleaner.cli_formatters import create_console_formatters, create_json_formatters, subscribe_formatters
from ghcr_cleaner.contracts.enums import OwnerType
from ghcr_cleaner.contracts.errors import CleanerError, ConfigurationError
from ghcr_cleaner.core.config import CleanerSettings, load_settings, resolve_config
from ghcr_cleaner.core.events import EventBus

__all__ = ["app"]

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="ghcr-cleaner",
    help="Delete old and orphaned container package versions from GitHub Packages.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ghcr-cleaner version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # Existence is checked in _load_dotenv for a clearer message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """Delete old and orphaned container package versions from GitHub Packages."""
    from ghcr_cleaner.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_cleaner_settings(settings_path: Path | None, overrides: dict[str, Any]) -> CleanerSettings:
    """Load settings or exit with a readable error."""
    try:
        settings = load_settings(settings_path, overrides)
    except ConfigurationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None
    logger.debug("settings_resolved", **resolve_config(settings))
    return settings


@app.command()
def clean(
    token: str | None = typer.Option(
        None,
        "--token",
        envvar="GITHUB_TOKEN",
        help="Token with read:packages and delete:packages permissions.",
        show_envvar=True,
    ),
    repo_owner: str | None = typer.Option(
        None,
        "--repo-owner",
        help="The repository owner name.",
    ),
    repo_name: str | None = typer.Option(
        None,
        "--repo-name",
        help="Delete containers only from this repository (name or owner/name).",
    ),
    package_name: str | None = typer.Option(
        None,
        "--package-name",
        help="Delete only from the package with this name.",
    ),
    owner_type: OwnerType | None = typer.Option(
        None,
        "--owner-type",
        help="Owner type (org or user). Default: org.",
        case_sensitive=False,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be deleted without deleting.",
    ),
    delete_untagged: bool | None = typer.Option(
        None,
        "--delete-untagged/--no-delete-untagged",
        help="Delete package versions that have no tags and are not a dependency of other tags. Default: on.",
    ),
    keep_at_most: int | None = typer.Option(
        None,
        "--keep-at-most",
        min=0,
        help="Keep at most the given amount of tagged image versions; 0 disables. Default: 5.",
    ),
    filter_tags: str | None = typer.Option(
        None,
        "--filter-tags",
        help="Comma-separated tags to consider for --keep-at-most. Accepts Unix shell-style wildcards.",
    ),
    skip_tags: str | None = typer.Option(
        None,
        "--skip-tags",
        help="Comma-separated tags to ignore for --keep-at-most. Accepts Unix shell-style wildcards.",
    ),
    strict_manifests: bool = typer.Option(
        False,
        "--strict-manifests",
        help="Do not delete untagged versions of a package if any of its manifests cannot be fetched.",
    ),
    api_url: str | None = typer.Option(
        None,
        "--api-url",
        envvar="GITHUB_API_URL",
        help="GitHub REST API base URL.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        min=0.1,
        help="Per-request timeout in seconds. Default: 10.",
    ),
    settings_file: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to a YAML settings file.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print one JSON object per event instead of text.",
    ),
) -> None:
    """Delete unwanted container package versions.

    Tagged versions beyond --keep-at-most (most recent first) are deleted,
    as are untagged versions that no retained tag depends on.

    Examples:

        # See what would be deleted
        ghcr-cleaner clean --repo-owner acme --dry-run

        # Keep the 10 newest release tags of one package
        ghcr-cleaner clean --repo-owner acme --package-name app --keep-at-most 10 --filter-tags 'v*'
    """
    from ghcr_cleaner.core.retention import DeletionExecutor, RetentionEngine, RetentionPolicy
    from ghcr_cleaner.engine import Orchestrator
    from ghcr_cleaner.plugins.clients import PackageDirectoryClient, RegistryClient

    overrides: dict[str, Any] = {
        "token": token,
        "repo_owner": repo_owner,
        "repo_name": repo_name,
        "package_name": package_name,
        "owner_type": owner_type,
        # Flags only override the settings file when given
        "dry_run": True if dry_run else None,
        "strict_manifests": True if strict_manifests else None,
        "delete_untagged": delete_untagged,
        "keep_at_most": keep_at_most,
        "filter_tags": filter_tags,
        "skip_tags": skip_tags,
        "api_url": api_url,
        "timeout_seconds": timeout,
    }
    settings = _load_cleaner_settings(settings_file, overrides)

    event_bus = EventBus()
    subscribe_formatters(event_bus, create_json_formatters() if json_output else create_console_formatters())

    if settings.dry_run and not json_output:
        typer.secho("Dry run: no package versions will be deleted.", fg=typer.colors.YELLOW)

    with (
        PackageDirectoryClient(
            token=settings.token,
            base_url=settings.api_url,
            timeout=settings.timeout_seconds,
            per_page=settings.per_page,
        ) as directory,
        RegistryClient(
            token=settings.token,
            base_url=settings.registry_url,
            timeout=settings.timeout_seconds,
        ) as registry,
    ):
        engine = RetentionEngine(RetentionPolicy.from_settings(settings), manifests=registry)
        executor = DeletionExecutor(directory, dry_run=settings.dry_run, event_bus=event_bus)
        orchestrator = Orchestrator(directory, engine, executor, event_bus=event_bus)
        try:
            result = orchestrator.run(
                settings.owner_type,
                settings.repo_owner,
                settings.repo_name,
                settings.package_name,
            )
        except CleanerError as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1) from None

    if result.exit_code != 0:
        raise typer.Exit(result.exit_code)
