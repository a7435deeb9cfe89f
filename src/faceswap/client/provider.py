"""Face-swap provider client: one method per provider endpoint."""

from __future__ import annotations

import logging
from typing import Any, cast

import httpx

from ..errors import (
    JobCreationFailed,
    JobStatusUnavailable,
    ResultFetchFailed,
    UploadSlotUnavailable,
    UploadTransferFailed,
)
from ..models.api import ImageAsset, PollOutcome, SwapJob, UploadSlot
from .base import BaseAsyncClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_BUDGET = 5


def _parse_retry_budget(value: Any, default: int) -> int:
    try:
        budget = int(value)
    except (TypeError, ValueError):
        return default
    return budget if budget >= 1 else default


def _is_url(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_order_id(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and bool(value.strip())


class AsyncFaceSwapClient(BaseAsyncClient):
    """Asynchronous client for the face-swap provider API.

    Each method performs exactly one HTTP exchange and translates transport
    failures into the matching :class:`~faceswap.errors.ProviderError`.

    Example:
        >>> async with AsyncFaceSwapClient(base_url, api_key) as client:
        ...     slot = await client.request_upload_slot(asset)
        ...     await client.upload_image(slot, asset)
        ...     job = await client.create_swap_job(slot.resource_url, style_url)
        ...     outcome = await client.get_job_status(job.order_id)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        jobs_base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        default_poll_budget: int = DEFAULT_POLL_BUDGET,
        **kwargs: Any,
    ):
        """Initialize the provider client.

        Args:
            base_url: Base URL of the provider API
            api_key: Provider API key
            jobs_base_url: Base URL of the job endpoints (defaults to base_url)
            timeout: Per-request timeout in seconds (default: 30.0)
            max_retries: Maximum number of retry attempts (default: 3)
            default_poll_budget: Poll budget used when the provider omits
                ``maxRetriesAllowed`` (default: 5)
            **kwargs: Forwarded to :class:`BaseAsyncClient`
        """
        super().__init__(
            base_url=base_url,
            api_key=api_key,
            jobs_base_url=jobs_base_url,
            timeout=timeout,
            max_retries=max_retries,
            **kwargs,
        )
        self.default_poll_budget = default_poll_budget

    async def request_upload_slot(self, asset: ImageAsset) -> UploadSlot:
        """Ask the provider for a staging location sized for ``asset``.

        Raises:
            UploadSlotUnavailable: If the request fails or either URL is missing
        """
        try:
            body = await self._api_request(
                "POST",
                "/uploadImageUrl",
                json={
                    "uploadType": "imageUrl",
                    "size": asset.size,
                    "contentType": asset.content_type,
                },
            )
        except httpx.HTTPError as e:
            raise UploadSlotUnavailable("Upload slot request failed", cause=e) from e

        if not isinstance(body, dict):
            raise UploadSlotUnavailable("Failed to get upload URL")

        upload_url = body.get("uploadImage")
        resource_url = body.get("imageUrl")
        if not _is_url(upload_url) or not _is_url(resource_url):
            raise UploadSlotUnavailable("Failed to get upload URL")

        return UploadSlot(upload_url=upload_url, resource_url=resource_url)

    async def upload_image(self, slot: UploadSlot, asset: ImageAsset) -> None:
        """PUT the asset bytes to the slot's upload URL, exactly once.

        Raises:
            UploadTransferFailed: If the transfer does not succeed
        """
        try:
            await self._request(
                "PUT",
                slot.upload_url,
                retry=False,
                content=asset.data,
                headers={
                    "Content-Type": asset.content_type,
                    "Content-Length": str(asset.size),
                },
            )
        except httpx.HTTPError as e:
            raise UploadTransferFailed("Image upload failed", cause=e) from e

    async def create_swap_job(self, image_url: str, style_image_url: str) -> SwapJob:
        """Trigger a face swap between two uploaded images.

        Never retried: a repeated trigger could start a second job.

        Raises:
            JobCreationFailed: If the request fails or no order id is returned
        """
        try:
            body = await self._api_request(
                "POST",
                "/face-swap",
                jobs=True,
                retry=False,
                json={"imageUrl": image_url, "styleImageUrl": style_image_url},
            )
        except httpx.HTTPError as e:
            raise JobCreationFailed("Face swap request failed", cause=e) from e

        order_id = body.get("orderId") if isinstance(body, dict) else None
        if not _is_order_id(order_id):
            raise JobCreationFailed("Failed to create face swap order")

        budget = _parse_retry_budget(
            body.get("maxRetriesAllowed"), self.default_poll_budget
        )
        return SwapJob(order_id=str(order_id), max_retries_allowed=budget)

    async def get_job_status(self, order_id: str) -> PollOutcome:
        """Query the status of a swap job once.

        Not retried: each request counts against the job's poll budget.

        Raises:
            JobStatusUnavailable: If the status endpoint cannot be reached
        """
        try:
            body = await self._api_request(
                "POST",
                "/order-status",
                jobs=True,
                retry=False,
                json={"orderId": order_id},
            )
        except httpx.HTTPError as e:
            raise JobStatusUnavailable(
                f"Order status request failed for {order_id}", cause=e
            ) from e
        return PollOutcome.from_status_body(body)

    async def download_result(self, output_url: str) -> tuple[bytes, str | None]:
        """Download the swapped image.

        Returns:
            Raw image bytes and the reported content type

        Raises:
            ResultFetchFailed: If the download does not succeed
        """
        try:
            response = await self._request("GET", output_url)
        except httpx.HTTPError as e:
            raise ResultFetchFailed("Failed to download swapped image", cause=e) from e
        return response.content, response.headers.get("Content-Type")

    async def health(self) -> dict[str, Any]:
        """Query the provider health endpoint.

        Raises:
            httpx.HTTPError: If health check fails
        """
        body = await self._api_request("GET", "/health")
        return cast(dict[str, Any], body) if isinstance(body, dict) else {}

    async def usage(self) -> dict[str, Any]:
        """Query the provider usage endpoint.

        Raises:
            httpx.HTTPError: If the usage request fails
        """
        body = await self._api_request("GET", "/usage")
        return cast(dict[str, Any], body) if isinstance(body, dict) else {}

    async def templates(self) -> list[dict[str, Any]]:
        """List face templates offered by the provider.

        Raises:
            httpx.HTTPError: If the templates request fails
        """
        body = await self._api_request("GET", "/templates")
        if isinstance(body, dict):
            body = body.get("templates")
        if not isinstance(body, list):
            return []
        return [item for item in body if isinstance(item, dict)]
