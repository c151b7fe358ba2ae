"""Shared test factories and fakes for ghcr-cleaner tests.

Available helpers:
- make_package / make_version: production record factories
- FakeManifests: in-memory ManifestSource
- FakeDeleter: in-memory VersionDeleter
"""

from tests.fixtures.factories import FakeDeleter, FakeManifests, make_package, make_version

__all__ = [
    "FakeDeleter",
    "FakeManifests",
    "make_package",
    "make_version",
]
