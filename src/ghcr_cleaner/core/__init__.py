"""Core subsystem: configuration, logging, events and retention."""

from ghcr_cleaner.core.config import CleanerSettings, load_settings, resolve_config
from ghcr_cleaner.core.events import EventBus

__all__ = [
    "CleanerSettings",
    "EventBus",
    "load_settings",
    "resolve_config",
]
