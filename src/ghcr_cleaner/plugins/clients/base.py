# src/ghcr_cleaner/plugins/clients/base.py
"""Base class for token-authenticated HTTP clients."""

from __future__ import annotations

import re
import time
from typing import Any

import httpx
import structlog

from ghcr_cleaner.contracts.errors import RemoteCallError

logger = structlog.get_logger(__name__)

# Response bodies are kept on errors for diagnostics, truncated to this size.
_MAX_ERROR_BODY = 2_000


class HTTPClientBase:
    """Shared plumbing for the package directory and registry clients.

    Wraps a single httpx.Client with:
    - Base URL resolution (absolute URLs pass through untouched)
    - Default headers including the bearer token
    - A fixed per-request timeout, no retries
    - Transport failures converted to the caller's error type

    Clients are used from one thread, one call at a time. They are context
    managers; leaving the block closes the connection pool.
    """

    _SENSITIVE_HEADERS_EXACT = frozenset(
        {
            "authorization",
            "proxy-authorization",
            "cookie",
            "set-cookie",
            "www-authenticate",
        }
    )
    _SENSITIVE_HEADER_WORDS = frozenset({"auth", "token", "secret", "key", "password"})

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: URL that relative paths are resolved against
            token: Bearer token sent with every request
            timeout: Request timeout in seconds
            headers: Extra default headers
            client: Pre-built httpx.Client (tests); one is created otherwise
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._default_headers = {**(headers or {}), "Authorization": f"Bearer {token}"}
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout, follow_redirects=True)

    def __enter__(self) -> HTTPClientBase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying httpx client if this object created it."""
        if self._owns_client:
            self._client.close()

    def _resolve_url(self, url: str) -> str:
        """Join base_url with a path; absolute URLs are returned unchanged."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}/{url.lstrip('/')}"

    def _is_sensitive_header(self, header_name: str) -> bool:
        lower_name = header_name.lower()
        if lower_name in self._SENSITIVE_HEADERS_EXACT:
            return True
        segments = [seg for seg in re.split(r"[^a-z0-9]+", lower_name) if seg]
        return any(seg in self._SENSITIVE_HEADER_WORDS for seg in segments)

    def _loggable_headers(self, headers: dict[str, str]) -> dict[str, str]:
        return {k: ("<redacted>" if self._is_sensitive_header(k) else v) for k, v in headers.items()}

    def _request(
        self,
        method: str,
        url: str,
        *,
        error_type: type[RemoteCallError],
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request.

        Non-success statuses are returned to the caller, which decides what
        counts as success for its endpoint.

        Raises:
            error_type: If no response was received (timeout, DNS, reset) or
                the URL could not be parsed
        """
        full_url = self._resolve_url(url)
        merged_headers = {**self._default_headers, **(headers or {})}
        logger.debug(
            "http_request",
            method=method,
            url=full_url,
            params=params,
            headers=self._loggable_headers(merged_headers),
        )

        start = time.perf_counter()
        try:
            response = self._client.request(
                method,
                full_url,
                params=params,
                headers=merged_headers,
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise error_type(f"{method} {full_url} failed: {type(e).__name__}: {e}") from e

        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "http_response",
            method=method,
            url=full_url,
            status_code=response.status_code,
            latency_ms=round(latency_ms, 1),
        )
        return response

    @staticmethod
    def _error_body(response: httpx.Response) -> str:
        return response.text[:_MAX_ERROR_BODY]
