# src/ghcr_cleaner/plugins/clients/packages.py
"""Package directory client for the GitHub Packages REST API.

Lists container packages of an owner, lists the versions of a package and
deletes versions. Listing calls follow ``Link: <...>; rel="next"`` headers
until the last page and accumulate everything before returning; a failure
on any page aborts the whole listing.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from ghcr_cleaner.contracts.enums import OwnerType
from ghcr_cleaner.contracts.errors import APIError, DeletionError
from ghcr_cleaner.contracts.packages import Package, Version
from ghcr_cleaner.plugins.clients.base import HTTPClientBase

logger = structlog.get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class _RepositoryRecord(BaseModel):
    name: str = ""


class _PackageRecord(BaseModel):
    name: str
    url: str
    repository: _RepositoryRecord | None = None


class _ContainerMetadata(BaseModel):
    tags: list[str] | None = None


class _VersionMetadata(BaseModel):
    container: _ContainerMetadata | None = None


class _VersionRecord(BaseModel):
    id: int
    name: str
    url: str
    updated_at: datetime
    metadata: _VersionMetadata | None = None

    @property
    def tags(self) -> tuple[str, ...]:
        if self.metadata is None or self.metadata.container is None:
            return ()
        return tuple(self.metadata.container.tags or ())


_PACKAGE_PAGE = TypeAdapter(list[_PackageRecord])
_VERSION_PAGE = TypeAdapter(list[_VersionRecord])


class PackageDirectoryClient(HTTPClientBase):
    """Client for listing and deleting container package versions.

    Example:
        with PackageDirectoryClient(token=token) as directory:
            for package in directory.list_packages(OwnerType.ORG, "acme"):
                versions = directory.list_versions(package)
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 10.0,
        per_page: int = 100,
        client: httpx.Client | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            token=token,
            timeout=timeout,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            client=client,
        )
        self._per_page = per_page

    def _iter_pages(self, url: str, params: dict[str, Any]) -> Iterator[Any]:
        """Yield the decoded JSON body of every page.

        Raises:
            APIError: On a non-200 page or a body that is not JSON
        """
        next_url: str | None = url
        next_params: dict[str, Any] | None = params
        page = 0
        while next_url is not None:
            response = self._request("GET", next_url, params=next_params, error_type=APIError)
            page += 1
            if response.status_code != httpx.codes.OK:
                raise APIError(
                    f"GitHub API error on {response.request.url}",
                    status_code=response.status_code,
                    body=self._error_body(response),
                )
            try:
                yield response.json()
            except ValueError as e:
                raise APIError(f"Invalid JSON from {response.request.url}: {e}") from e

            # The next link already carries the query string
            next_url = response.links.get("next", {}).get("url")
            next_params = None
            if next_url is not None:
                logger.debug("following_next_page", page=page + 1, url=next_url)

    def list_packages(
        self,
        owner_type: OwnerType,
        owner: str,
        repo_name: str = "",
        package_name: str = "",
    ) -> list[Package]:
        """List container packages of an owner.

        Args:
            owner_type: Organization or user
            owner: Account login
            repo_name: Keep only packages linked to this repository
                (case-insensitive); empty keeps all
            package_name: Keep only the package with exactly this name;
                empty keeps all

        Returns:
            Matching packages in API order

        Raises:
            APIError: If any page cannot be fetched or decoded
        """
        path = f"/{OwnerType(owner_type).path_segment}/{owner}/packages"
        params = {"package_type": "container", "per_page": self._per_page}

        packages: list[Package] = []
        for page in self._iter_pages(path, params):
            try:
                records = _PACKAGE_PAGE.validate_python(page)
            except ValidationError as e:
                raise APIError(f"Unexpected package listing format: {e}") from e
            for record in records:
                linked_repo = record.repository.name if record.repository is not None else ""
                if repo_name and linked_repo.lower() != repo_name.lower():
                    continue
                if package_name and record.name != package_name:
                    continue
                packages.append(
                    Package(
                        name=record.name,
                        owner=owner,
                        owner_type=OwnerType(owner_type),
                        versions_url=f"{record.url}/versions",
                    )
                )

        logger.info("packages_listed", owner=owner, count=len(packages))
        return packages

    def list_versions(self, package: Package) -> list[Version]:
        """List all versions of a package.

        Raises:
            APIError: If any page cannot be fetched or decoded
        """
        versions: list[Version] = []
        for page in self._iter_pages(package.versions_url, {"per_page": self._per_page}):
            try:
                records = _VERSION_PAGE.validate_python(page)
            except ValidationError as e:
                raise APIError(f"Unexpected version listing format for {package.name}: {e}") from e
            for record in records:
                versions.append(
                    Version(
                        id=record.id,
                        digest=record.name,
                        timestamp=record.updated_at,
                        tags=record.tags,
                        url=record.url,
                        package=package,
                    )
                )
        return versions

    def delete_version(self, version: Version) -> None:
        """Delete a version via its own API URL.

        Raises:
            DeletionError: Unless the API answers 204 No Content
        """
        if not version.url:
            raise DeletionError(f"Version {version.digest} has no API URL")
        response = self._request("DELETE", version.url, error_type=DeletionError)
        if response.status_code != httpx.codes.NO_CONTENT:
            raise DeletionError(
                f"Failed to delete {version.digest}",
                status_code=response.status_code,
                body=self._error_body(response),
            )
