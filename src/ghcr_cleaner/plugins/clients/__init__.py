"""HTTP clients for the package directory API and the container registry."""

from ghcr_cleaner.plugins.clients.base import HTTPClientBase
from ghcr_cleaner.plugins.clients.packages import PackageDirectoryClient
from ghcr_cleaner.plugins.clients.registry import RegistryClient

__all__ = [
    "HTTPClientBase",
    "PackageDirectoryClient",
    "RegistryClient",
]
