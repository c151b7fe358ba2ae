"""Run orchestration for ghcr-cleaner."""

from ghcr_cleaner.engine.orchestrator import Orchestrator, PackageDirectory

__all__ = ["Orchestrator", "PackageDirectory"]
