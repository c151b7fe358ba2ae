"""Exception hierarchy shared by the clients, the engine and the CLI.

Fatal errors (configuration, package listing) propagate to the CLI.
Per-version errors (manifest fetch, delete) are absorbed by the caller
into logs and counters.
"""


class CleanerError(Exception):
    """Base class for all ghcr-cleaner errors."""


class ConfigurationError(CleanerError):
    """Raised when required input is missing or contradictory.

    Always raised before any network call is made.
    """


class RemoteCallError(CleanerError):
    """Error carrying the HTTP status and body of a failed response.

    ``status_code`` is None when the request never produced a response
    (timeout, connection reset) or the body could not be decoded.
    """

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.status_code is None:
            return message
        if self.body:
            return f"{message}: {self.status_code}, {self.body}"
        return f"{message}: {self.status_code}"


class APIError(RemoteCallError):
    """Non-success response from the package directory API."""


class RegistryError(RemoteCallError):
    """Non-success or unparsable manifest response from the registry."""


class DeletionError(RemoteCallError):
    """Delete call that did not answer 204 No Content."""
