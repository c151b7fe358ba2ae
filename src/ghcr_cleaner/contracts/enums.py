"""Status codes, modes, and kinds used across subsystem boundaries."""

from enum import StrEnum


class OwnerType(StrEnum):
    """Kind of account that owns a package.

    The value is what users pass on the command line; ``path_segment``
    is the matching REST collection name.
    """

    ORG = "org"
    USER = "user"

    @property
    def path_segment(self) -> str:
        return f"{self.value}s"


class UnwantedReason(StrEnum):
    """Why the retention engine marked a version for deletion."""

    RECENCY = "recency"
    UNTAGGED = "untagged"


class DeletionStatus(StrEnum):
    """Outcome of a single delete call.

    Values:
        DELETED: Host answered 204 No Content
        DRY_RUN: Delete call skipped, reported as success
        FAILED: Any other response or a transport failure
    """

    DELETED = "deleted"
    DRY_RUN = "dry_run"
    FAILED = "failed"
