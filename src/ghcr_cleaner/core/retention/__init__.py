# src/ghcr_cleaner/core/retention/__init__.py
"""Retention management for container package versions.

Provides RetentionEngine for deciding which versions are unwanted and
DeletionExecutor for applying that decision.
"""

from ghcr_cleaner.core.retention.engine import ManifestSource, RetentionEngine, collect_dependencies
from ghcr_cleaner.core.retention.executor import DeletionExecutor, VersionDeleter
from ghcr_cleaner.core.retention.matching import matches_any, matches_pattern
from ghcr_cleaner.core.retention.policy import RetentionPolicy, decide

__all__ = [
    "DeletionExecutor",
    "ManifestSource",
    "RetentionEngine",
    "RetentionPolicy",
    "VersionDeleter",
    "collect_dependencies",
    "decide",
    "matches_any",
    "matches_pattern",
]
