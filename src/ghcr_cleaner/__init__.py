"""
ghcr-cleaner: retention policies for GitHub Container Registry packages.

Deletes tagged versions beyond a recency cap and untagged versions that
no retained multi-architecture tag still depends on.
"""

__version__ = "0.3.0"
