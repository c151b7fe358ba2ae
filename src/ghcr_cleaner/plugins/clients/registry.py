# src/ghcr_cleaner/plugins/clients/registry.py
"""Container registry client for manifest-list lookups.

Only one endpoint is used: ``GET /v2/<repository>/manifests/<digest>``,
asking for an OCI image index or a Docker manifest list. The children of
that list are what the untagged rule must not delete.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from ghcr_cleaner.contracts.errors import RegistryError
from ghcr_cleaner.contracts.packages import ManifestDescriptor
from ghcr_cleaner.plugins.clients.base import HTTPClientBase

logger = structlog.get_logger(__name__)

MANIFEST_LIST_ACCEPT = ",".join(
    (
        "application/vnd.oci.image.index.v1+json",
        "application/vnd.docker.distribution.manifest.list.v2+json",
    )
)


class _Descriptor(BaseModel):
    mediaType: str = ""
    digest: str
    size: int | None = None
    platform: dict[str, Any] | None = None


class _ManifestList(BaseModel):
    # Single-platform manifests have no "manifests" key
    manifests: list[_Descriptor] | None = None


class RegistryClient(HTTPClientBase):
    """Fetches manifest lists from an OCI distribution registry.

    Example:
        with RegistryClient(token=token) as registry:
            children = registry.get_manifest_children("acme/app", "sha256:...")
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://ghcr.io",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            token=token,
            timeout=timeout,
            headers={"Accept": MANIFEST_LIST_ACCEPT},
            client=client,
        )

    def get_manifest_descriptors(self, repository: str, reference: str) -> list[ManifestDescriptor]:
        """Fetch ``repository@reference`` and return its child descriptors.

        Args:
            repository: Repository path, e.g. ``acme/app``
            reference: Digest (or tag) of the manifest list

        Returns:
            Child descriptors; empty for a single-platform manifest

        Raises:
            RegistryError: Non-200 response, transport failure or a body
                that is not a manifest document
        """
        url = f"/v2/{repository}/manifests/{reference}"
        response = self._request("GET", url, error_type=RegistryError)
        if response.status_code != httpx.codes.OK:
            raise RegistryError(
                f"Failed to get manifest {repository}@{reference}",
                status_code=response.status_code,
                body=self._error_body(response),
            )

        try:
            document = _ManifestList.model_validate_json(response.content)
        except ValidationError as e:
            raise RegistryError(f"Unparsable manifest {repository}@{reference}: {e}") from e

        descriptors = [
            ManifestDescriptor(
                digest=entry.digest,
                media_type=entry.mediaType,
                size=entry.size,
                platform=entry.platform,
            )
            for entry in document.manifests or []
        ]
        logger.debug("manifest_children", repository=repository, reference=reference, children=len(descriptors))
        return descriptors

    def get_manifest_children(self, repository: str, reference: str) -> list[str]:
        """Return the child digests of a manifest list.

        Raises:
            RegistryError: See get_manifest_descriptors
        """
        return [descriptor.digest for descriptor in self.get_manifest_descriptors(repository, reference)]
