# tests/fixtures/factories.py
"""Test-only factories and in-memory fakes.

Usage:
    from tests.fixtures.factories import make_version, FakeManifests
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from ghcr_cleaner.contracts import (
    DeletionError,
    ManifestDescriptor,
    OwnerType,
    Package,
    RegistryError,
    Version,
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)

OCI_INDEX = "application/vnd.oci.image.index.v1+json"
OCI_MANIFEST = "application/vnd.oci.image.manifest.v1+json"


def make_package(
    name: str = "app",
    owner: str = "acme",
    owner_type: OwnerType = OwnerType.ORG,
) -> Package:
    return Package(
        name=name,
        owner=owner,
        owner_type=owner_type,
        versions_url=f"https://api.github.com/orgs/{owner}/packages/container/{name}/versions",
    )


def make_version(
    version_id: int,
    *tags: str,
    digest: str | None = None,
    hours: int | None = None,
    package: Package | None = None,
) -> Version:
    """Build a Version.

    ``hours`` is the offset from BASE_TIME; it defaults to ``version_id``
    so higher ids are more recent.
    """
    pkg = package if package is not None else make_package()
    return Version(
        id=version_id,
        digest=digest if digest is not None else f"sha256:{version_id:064x}",
        timestamp=BASE_TIME + timedelta(hours=version_id if hours is None else hours),
        tags=tuple(tags),
        url=f"{pkg.versions_url}/{version_id}",
        package=pkg,
    )


class FakeManifests:
    """In-memory ManifestSource keyed by reference digest."""

    def __init__(self) -> None:
        self.lists: dict[str, list[ManifestDescriptor]] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def add_list(self, reference: str, *children: str, index_children: tuple[str, ...] = ()) -> None:
        descriptors = [ManifestDescriptor(digest=child, media_type=OCI_MANIFEST) for child in children]
        descriptors += [ManifestDescriptor(digest=child, media_type=OCI_INDEX) for child in index_children]
        self.lists[reference] = descriptors

    def fail(self, reference: str) -> None:
        self.failing.add(reference)

    def get_manifest_descriptors(self, repository: str, reference: str) -> list[ManifestDescriptor]:
        self.calls.append((repository, reference))
        if reference in self.failing:
            raise RegistryError(f"Failed to get manifest {repository}@{reference}", status_code=404, body="not found")
        return list(self.lists.get(reference, []))


class FakeDeleter:
    """In-memory VersionDeleter; ids in ``failing`` raise DeletionError."""

    def __init__(self, failing: set[int] | None = None) -> None:
        self.failing = failing or set()
        self.deleted: list[Version] = []

    def delete_version(self, version: Version) -> None:
        if version.id in self.failing:
            raise DeletionError(f"Failed to delete {version.digest}", status_code=500, body="boom")
        self.deleted.append(version)
