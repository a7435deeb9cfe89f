"""Face-swap job orchestration.

:class:`JobOrchestrator` drives the provider through its four legs:

1. upload the subject image to a provider-issued slot
2. upload the style image the same way
3. trigger the swap job
4. poll the job until it completes, fails or exhausts its poll budget

and finally downloads the swapped image. Any step failure reaches the caller
as :class:`~faceswap.errors.FaceSwapUnavailable`; task cancellation is never
folded into it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Protocol, Self

from pydantic import ValidationError

from .client.provider import AsyncFaceSwapClient
from .errors import (
    FaceSwapUnavailable,
    JobFailed,
    JobTimedOut,
    ProviderError,
    SwapCancelled,
)
from .images import validate_image_for_swap
from .models.api import (
    ImageAsset,
    ImageValidation,
    JobState,
    ServiceState,
    ServiceStatus,
    SwapJob,
    SwapResult,
    SwapTemplate,
    UsageStats,
)

logger = logging.getLogger(__name__)

# Provider processing latency between status polls
POLL_INTERVAL_SECONDS = 3.0

UNAVAILABLE_MESSAGE = "Face swap failed, please try again later."


class FaceSwapService(Protocol):
    """Operations shared by the live and offline orchestrators."""

    async def perform_swap(
        self,
        subject: ImageAsset,
        style: ImageAsset,
        *,
        deadline: float | None = None,
    ) -> SwapResult:
        """Swap the face of ``subject`` using ``style``."""
        ...

    async def check_service_status(self) -> ServiceStatus:
        """Report provider availability without raising."""
        ...

    async def get_usage_stats(self) -> UsageStats:
        """Report provider usage counters without raising."""
        ...

    async def list_templates(self) -> list[SwapTemplate]:
        """List available face templates."""
        ...

    def validate_image_for_swap(self, asset: ImageAsset) -> ImageValidation:
        """Pre-flight check of an image."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...

    async def __aenter__(self) -> Self: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None: ...


class JobOrchestrator:
    """Runs face swaps against the live provider.

    The client is constructed once at startup and shared; every
    :meth:`perform_swap` call is independent of the others.

    Example:
        >>> client = AsyncFaceSwapClient(base_url=url, api_key=key)
        >>> async with JobOrchestrator(client) as orchestrator:
        ...     result = await orchestrator.perform_swap(subject, style)
    """

    def __init__(
        self,
        client: AsyncFaceSwapClient,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval

    async def close(self) -> None:
        """Close the underlying provider client."""
        await self.client.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def perform_swap(
        self,
        subject: ImageAsset,
        style: ImageAsset,
        *,
        deadline: float | None = None,
    ) -> SwapResult:
        """Swap the face in ``subject`` using ``style``.

        Args:
            subject: Photo whose face is swapped
            style: Photo providing the target style
            deadline: Optional overall time limit in seconds

        Returns:
            SwapResult: Swapped image bytes and the provider output URL

        Raises:
            FaceSwapUnavailable: If any protocol step fails
            SwapCancelled: If the deadline expires first
            asyncio.CancelledError: If the calling task is cancelled
        """
        try:
            async with asyncio.timeout(deadline):
                return await self._run_swap(subject, style)
        except TimeoutError as e:
            logger.warning(f"Face swap abandoned: deadline of {deadline}s exceeded")
            raise SwapCancelled(
                f"Face swap exceeded its {deadline}s deadline", cause=e
            ) from e
        except ProviderError as e:
            detail = f": {e.cause}" if e.cause else ""
            logger.error(f"Face swap error at step '{e.step}': {e.message}{detail}")
            raise FaceSwapUnavailable(UNAVAILABLE_MESSAGE, reason=e) from e

    async def _run_swap(self, subject: ImageAsset, style: ImageAsset) -> SwapResult:
        started = time.monotonic()

        subject_url = await self._upload(subject, "subject")
        style_url = await self._upload(style, "style")

        job = await self.client.create_swap_job(subject_url, style_url)
        logger.info(
            f"Face swap order {job.order_id} created "
            f"(poll budget: {job.max_retries_allowed})"
        )

        output_url = await self._wait_for_output(job)

        data, content_type = await self.client.download_result(output_url)
        logger.info(
            f"Face swap order {job.order_id} completed in "
            f"{time.monotonic() - started:.2f}s ({len(data)} bytes)"
        )
        return SwapResult(
            data=data,
            output_url=output_url,
            order_id=job.order_id,
            content_type=content_type,
        )

    async def _upload(self, asset: ImageAsset, role: str) -> str:
        started = time.monotonic()
        slot = await self.client.request_upload_slot(asset)
        await self.client.upload_image(slot, asset)
        logger.debug(
            f"Uploaded {role} image ({asset.size} bytes, {asset.content_type}) "
            f"in {time.monotonic() - started:.2f}s"
        )
        return slot.resource_url

    async def _wait_for_output(self, job: SwapJob) -> str:
        """Poll ``job`` until it reaches a terminal state.

        Returns:
            The output URL of the completed job

        Raises:
            JobFailed: As soon as the provider reports failure
            JobTimedOut: When the poll budget runs out
        """
        for attempt in range(1, job.max_retries_allowed + 1):
            await asyncio.sleep(self.poll_interval)

            outcome = await self.client.get_job_status(job.order_id)

            if outcome.state is JobState.COMPLETED and outcome.output_url:
                logger.debug(
                    f"Order {job.order_id} completed on poll "
                    f"{attempt}/{job.max_retries_allowed}"
                )
                return outcome.output_url

            if outcome.state is JobState.FAILED:
                raise JobFailed("Face swap failed on server", order_id=job.order_id)

            if outcome.state is JobState.MALFORMED:
                logger.debug(
                    f"Skipping malformed status for order {job.order_id} "
                    f"({attempt}/{job.max_retries_allowed})"
                )
            else:
                logger.debug(
                    f"Order {job.order_id} still processing "
                    f"(status={outcome.raw_status}, "
                    f"{attempt}/{job.max_retries_allowed})"
                )

        raise JobTimedOut(
            "Face swap timed out",
            order_id=job.order_id,
            attempts=job.max_retries_allowed,
        )

    async def check_service_status(self) -> ServiceStatus:
        """Probe the provider health endpoint. Never raises."""
        try:
            details = await self.client.health()
        except Exception as e:
            logger.error(f"Service status check error: {e}")
            return ServiceStatus(
                status=ServiceState.OFFLINE,
                available=False,
                message="Face swap service is temporarily unavailable",
                error=str(e),
            )

        return ServiceStatus(
            status=ServiceState.ONLINE,
            available=True,
            message="Face swap service is available",
            details=details,
        )

    async def get_usage_stats(self) -> UsageStats:
        """Fetch provider usage counters. Never raises."""
        try:
            usage = await self.client.usage()
            return UsageStats.model_validate(usage)
        except Exception as e:
            logger.error(f"Usage stats error: {e}")
            return UsageStats(error=True)

    async def list_templates(self) -> list[SwapTemplate]:
        """List provider face templates; empty when unavailable.

        Items that do not parse as templates are skipped individually.
        """
        try:
            items = await self.client.templates()
        except Exception as e:
            logger.warning(f"Get templates error: {e}")
            return []

        templates = []
        for item in items:
            try:
                templates.append(SwapTemplate.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid template {item!r}: {e}")
        return templates

    def validate_image_for_swap(self, asset: ImageAsset) -> ImageValidation:
        """Pre-flight check; see :func:`faceswap.images.validate_image_for_swap`."""
        return validate_image_for_swap(asset)
