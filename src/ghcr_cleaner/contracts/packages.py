# src/ghcr_cleaner/contracts/packages.py
"""Package, version and manifest records.

These are read-only snapshots of what the package host reported during
one run. Nothing in the engine mutates them; the retention decision only
refers to them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ghcr_cleaner.contracts.enums import OwnerType

# Media types that describe a list of child manifests rather than a
# single-platform image.
INDEX_MEDIA_TYPES: frozenset[str] = frozenset(
    {
        "application/vnd.oci.image.index.v1+json",
        "application/vnd.docker.distribution.manifest.list.v2+json",
    }
)


@dataclass(frozen=True)
class Package:
    """A container image repository under an owner.

    Attributes:
        name: Package name as reported by the host (may contain ``/``)
        owner: Account login that owns the package
        owner_type: Whether the owner is an organization or a user
        versions_url: API URL listing this package's versions
    """

    name: str
    owner: str
    owner_type: OwnerType
    versions_url: str

    @property
    def repository(self) -> str:
        """Registry repository path (``owner/name``).

        Registry repository names are always lowercase, while account
        logins are not.
        """
        return f"{self.owner}/{self.name}".lower()


@dataclass(frozen=True)
class Version:
    """One content-addressed package version.

    Attributes:
        id: Host-assigned identifier, stable across pages
        digest: Content digest; identity and dependency-reference key
        timestamp: Last-updated time, used for recency ordering
        tags: Tags pointing at this version; empty means untagged
        url: API URL of this version, used verbatim for DELETE
        package: Owning package
    """

    id: int
    digest: str
    timestamp: datetime
    tags: tuple[str, ...] = ()
    url: str = ""
    package: Package | None = field(default=None, compare=False, repr=False)

    @property
    def is_tagged(self) -> bool:
        return len(self.tags) > 0


@dataclass(frozen=True)
class ManifestDescriptor:
    """One entry of a manifest list or image index."""

    digest: str
    media_type: str = ""
    size: int | None = None
    platform: Mapping[str, Any] | None = field(default=None, compare=False)

    @property
    def is_index(self) -> bool:
        """True if this child is itself a manifest list."""
        return self.media_type in INDEX_MEDIA_TYPES
