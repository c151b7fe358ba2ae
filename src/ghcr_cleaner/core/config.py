# src/ghcr_cleaner/core/config.py
"""
Configuration schema and loading for ghcr-cleaner.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction and are handed to each
component's constructor; nothing reads them from global state.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator, model_validator

from ghcr_cleaner.contracts.enums import OwnerType
from ghcr_cleaner.contracts.errors import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REGISTRY_URL = "https://ghcr.io"

_REDACTED = "***"


def parse_tag_list(value: str) -> tuple[str, ...]:
    """Split a comma- or newline-separated pattern list.

    Blank entries are dropped and surrounding whitespace is stripped, so
    multi-line workflow inputs and ``"a, b,"`` both work.
    """
    parts = value.replace("\n", ",").split(",")
    return tuple(part.strip() for part in parts if part.strip())


class CleanerSettings(BaseModel):
    """Validated configuration for one cleanup run."""

    model_config = {"frozen": True}

    token: str = Field(repr=False, description="Token with read/delete packages permission")
    repo_owner: str = Field(description="Owner (organization or user login) of the packages")
    repo_name: str = Field(default="", description="Only packages linked to this repository")
    package_name: str = Field(default="", description="Only the package with this exact name")
    owner_type: OwnerType = Field(default=OwnerType.ORG, description="Whether repo_owner is an org or a user")

    dry_run: bool = Field(default=False, description="Report deletions without performing them")
    delete_untagged: bool = Field(
        default=True,
        description="Delete untagged versions that no retained tag depends on",
    )
    keep_at_most: int = Field(
        default=5,
        ge=0,
        description="Keep at most this many tagged versions (0 disables the cap)",
    )
    filter_tags: tuple[str, ...] = Field(default=(), description="Only tags matching these globs count towards the cap")
    skip_tags: tuple[str, ...] = Field(default=(), description="Tags matching these globs are never capped")
    strict_manifests: bool = Field(
        default=False,
        description="Skip a package's untagged deletions if any of its manifests cannot be fetched",
    )

    api_url: str = Field(default=DEFAULT_API_URL, description="Package directory REST API base URL")
    registry_url: str = Field(default=DEFAULT_REGISTRY_URL, description="Container registry base URL")
    timeout_seconds: float = Field(default=10.0, gt=0, description="Per-request timeout")
    per_page: int = Field(default=100, gt=0, le=100, description="Page size for listing calls")

    @model_validator(mode="before")
    @classmethod
    def split_qualified_repo_name(cls, data: Any) -> Any:
        """Accept ``owner/name`` for repo_name if the owner matches repo_owner."""
        if not isinstance(data, dict):
            return data
        repo_name = data.get("repo_name")
        if not isinstance(repo_name, str) or "/" not in repo_name:
            return data
        owner, _, name = repo_name.partition("/")
        repo_owner = str(data.get("repo_owner") or "")
        if owner.lower() != repo_owner.lower():
            raise ValueError(f"Mismatch in repository: {repo_name} and owner: {repo_owner}")
        return {**data, "repo_name": name}

    @field_validator("token", "repo_owner")
    @classmethod
    def validate_required(cls, v: str, info: ValidationInfo) -> str:
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name} is required")
        return v

    @field_validator("package_name")
    @classmethod
    def strip_package_slashes(cls, v: str) -> str:
        return v.strip().strip("/")

    @field_validator("filter_tags", "skip_tags", mode="before")
    @classmethod
    def parse_patterns(cls, v: Any) -> Any:
        """Accept a delimited string or a list of patterns."""
        if v is None:
            return ()
        if isinstance(v, str):
            return parse_tag_list(v)
        if isinstance(v, list | tuple):
            patterns: list[str] = []
            for item in v:
                patterns.extend(parse_tag_list(str(item)))
            return tuple(patterns)
        return v

    @field_validator("api_url", "registry_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"must be an http(s) URL, got {v!r}")
        return v


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"])
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        lines.append(f"{loc}: {msg}" if loc else msg)
    return "Invalid configuration: " + "; ".join(lines)


def load_settings(
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> CleanerSettings:
    """Load settings from an optional YAML file, environment and overrides.

    Precedence (highest first):
    1. ``overrides`` entries that are not None (CLI options)
    2. Environment variables (GHCR_CLEANER_*)
    3. Config file
    4. Defaults from the Pydantic schema

    Args:
        config_path: Optional path to a YAML settings file
        overrides: Explicit values, typically from CLI options

    Returns:
        Validated CleanerSettings instance

    Raises:
        ConfigurationError: If the file is missing or validation fails
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="GHCR_CLEANER",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys and its own bookkeeping entries
    known_fields = set(CleanerSettings.model_fields)
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k.lower() in known_fields}

    for key, value in (overrides or {}).items():
        if value is not None:
            raw_config[key] = value

    try:
        return CleanerSettings(**raw_config)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e


def resolve_config(settings: CleanerSettings) -> dict[str, Any]:
    """Convert validated settings to a dict safe for logging.

    The token is redacted; use the settings object itself for runtime calls.
    """
    config_dict = settings.model_dump(mode="json")
    config_dict["token"] = _REDACTED
    return config_dict
