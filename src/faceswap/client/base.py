"""Base client for face-swap provider communication."""

from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import Any, Self

import httpx

from ..errors import ConfigurationMissing

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


def _calculate_retry_delay(
    attempt: int,
    initial_delay: float,
    max_delay: float,
    backoff_factor: float,
    randomization: bool,
) -> float:
    """Calculate retry delay with exponential backoff and optional jitter.

    Args:
        attempt: Current retry attempt number (0-indexed)
        initial_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Multiplier for exponential backoff
        randomization: Whether to add random jitter to prevent thundering herd

    Returns:
        float: Delay in seconds before next retry
    """
    # initial_delay * (backoff_factor ^ attempt), capped
    delay = min(initial_delay * (backoff_factor**attempt), max_delay)

    # Jitter keeps between 50% and 100% of the computed delay
    if randomization:
        delay = delay * (0.5 + random.random() * 0.5)

    return delay


def _unwrap_body(payload: Any) -> Any:
    """Return the provider payload without its ``{"body": ...}`` envelope."""
    if isinstance(payload, dict) and "body" in payload:
        return payload["body"]
    return payload


class BaseAsyncClient:
    """Base async client for the face-swap provider.

    Owns the pooled ``httpx.AsyncClient``, the API key header and the retry
    policy. Calls against the provider API (``_api_request``) carry the API key;
    calls against pre-signed upload and output URLs (``_request``) do not.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        jobs_base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        insecure: bool = False,
        ca_bundle_path: Path | str | None = None,
        retry_initial_delay: float = 1.0,
        retry_max_delay: float = 60.0,
        retry_backoff_factor: float = 2.0,
        retry_randomization: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the base async client.

        Args:
            base_url: Base URL of the provider API (upload and probe endpoints)
            api_key: Provider API key, sent as ``x-api-key``
            jobs_base_url: Base URL of the job endpoints (defaults to base_url)
            timeout: Per-request timeout in seconds
            max_retries: Maximum number of retry attempts for idempotent calls
            insecure: Allow insecure connections (skip TLS verification)
            ca_bundle_path: Path to CA bundle for TLS verification
            retry_initial_delay: Initial delay between retries in seconds (default: 1.0)
            retry_max_delay: Maximum delay between retries in seconds (default: 60.0)
            retry_backoff_factor: Multiplier for exponential backoff (default: 2.0)
            retry_randomization: Add random jitter to retry delays (default: True)
            transport: Custom httpx transport (used by tests)

        Raises:
            ConfigurationMissing: If base_url or api_key is empty
        """
        if not base_url:
            raise ConfigurationMissing("Face swap API URL is not configured")
        if not api_key:
            raise ConfigurationMissing("Face swap API key is not configured")

        self.base_url = base_url.rstrip("/")
        self.jobs_base_url = (jobs_base_url or base_url).rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_initial_delay = retry_initial_delay
        self.retry_max_delay = retry_max_delay
        self.retry_backoff_factor = retry_backoff_factor
        self.retry_randomization = retry_randomization

        verify: bool | str
        if insecure:
            verify = False
            logger.warning("TLS verification disabled (insecure mode)")
        elif ca_bundle_path:
            verify = str(ca_bundle_path)
            logger.debug(f"TLS verification using CA bundle: {ca_bundle_path}")
        else:
            verify = True

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
            verify=verify,
            transport=transport,
        )

    @property
    def _auth_headers(self) -> dict[str, str]:
        return {API_KEY_HEADER: self.api_key, "Content-Type": "application/json"}

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def _request(
        self, method: str, url: str, *, retry: bool = True, **kwargs: Any
    ) -> httpx.Response:
        """Make HTTP request with exponential backoff retry logic.

        Args:
            method: HTTP method
            url: Absolute URL
            retry: Retry timeouts, connection errors and 5xx responses.
                Must be False for non-idempotent calls.
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response: Response object

        Raises:
            httpx.HTTPError: If request fails after retries
        """
        max_retries = self.max_retries if retry else 0
        last_exception: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
                response.raise_for_status()
                logger.debug(f"{method} {url} -> {response.status_code}")
                return response

            except httpx.TimeoutException as e:
                last_exception = e
                if attempt == max_retries:
                    logger.error(
                        f"Request to {url} timed out after {max_retries} retries"
                    )
                    raise
                delay = _calculate_retry_delay(
                    attempt,
                    self.retry_initial_delay,
                    self.retry_max_delay,
                    self.retry_backoff_factor,
                    self.retry_randomization,
                )
                logger.warning(
                    f"Request to {url} timed out, retrying in {delay:.2f}s "
                    f"({attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)

            except httpx.HTTPStatusError as e:
                last_exception = e
                if e.response.status_code == 401:
                    logger.error(
                        "Authentication failed (401). Ensure FACE_SWAP_API_KEY "
                        "holds a valid provider API key"
                    )
                    raise
                elif e.response.status_code == 403:
                    logger.error(
                        "Authorization failed (403). The API key is not allowed "
                        "to access this resource"
                    )
                    raise
                # Only server errors (5xx) are retried
                if e.response.status_code < 500 or attempt == max_retries:
                    raise
                delay = _calculate_retry_delay(
                    attempt,
                    self.retry_initial_delay,
                    self.retry_max_delay,
                    self.retry_backoff_factor,
                    self.retry_randomization,
                )
                logger.warning(
                    f"Server error {e.response.status_code} for {url}, "
                    f"retrying in {delay:.2f}s ({attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)

            except httpx.RequestError as e:
                last_exception = e
                if attempt == max_retries:
                    logger.error(
                        f"Connection error to {url} after {max_retries} retries: {e}"
                    )
                    raise
                delay = _calculate_retry_delay(
                    attempt,
                    self.retry_initial_delay,
                    self.retry_max_delay,
                    self.retry_backoff_factor,
                    self.retry_randomization,
                )
                logger.warning(
                    f"Connection error to {url}, retrying in {delay:.2f}s "
                    f"({attempt + 1}/{max_retries}): {e}"
                )
                await asyncio.sleep(delay)

        # This should never be reached, but mypy needs a return
        if last_exception:
            raise last_exception
        raise RuntimeError("Request retry loop completed without returning")

    async def _api_request(
        self,
        method: str,
        path: str,
        *,
        jobs: bool = False,
        retry: bool = True,
        **kwargs: Any,
    ) -> Any:
        """Call a provider API endpoint and return its unwrapped JSON body.

        Args:
            method: HTTP method
            path: Endpoint path (without base URL)
            jobs: Resolve against the job endpoints base URL
            retry: Whether transient failures may be retried
            **kwargs: Additional arguments for httpx (json, params, etc.)

        Returns:
            The response payload with any ``body`` envelope removed, or None
            when the response has no JSON content.
        """
        base = self.jobs_base_url if jobs else self.base_url
        response = await self._request(
            method,
            f"{base}{path}",
            retry=retry,
            headers=self._auth_headers,
            **kwargs,
        )
        if not response.content:
            return None
        try:
            return _unwrap_body(response.json())
        except ValueError:
            logger.warning(f"Non-JSON response from {base}{path}")
            return None
