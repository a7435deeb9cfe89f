"""Offline face-swap service for development without provider credentials.

Selected explicitly at startup (``FACE_SWAP_MODE=offline``); the live
orchestrator never falls back to it.
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Any, Self

from PIL import Image, ImageDraw, ImageEnhance, ImageFilter, UnidentifiedImageError

from .errors import SwapCancelled
from .images import validate_image_for_swap
from .models.api import (
    ImageAsset,
    ImageValidation,
    ServiceState,
    ServiceStatus,
    SwapResult,
    SwapTemplate,
    UsageStats,
)

logger = logging.getLogger(__name__)

OFFLINE_URL_SCHEME = "offline://"

BUILTIN_TEMPLATES = [
    SwapTemplate(
        id="celebrity_1",
        name="Celebrity Template 1",
        description="Popular celebrity face template",
        thumbnail="/public/images/template1_thumb.jpg",
    ),
    SwapTemplate(
        id="celebrity_2",
        name="Celebrity Template 2",
        description="Another celebrity face template",
        thumbnail="/public/images/template2_thumb.jpg",
    ),
    SwapTemplate(
        id="model_1",
        name="Fashion Model",
        description="Professional model face template",
        thumbnail="/public/images/model1_thumb.jpg",
    ),
]


def render_placeholder(data: bytes) -> bytes:
    """Brighten, saturate and caption an image to stand in for a swap result.

    Raises:
        UnidentifiedImageError: If ``data`` is not a decodable image
    """
    with Image.open(io.BytesIO(data)) as source:
        image = source.convert("RGB")

    image = ImageEnhance.Brightness(image).enhance(1.1)
    image = ImageEnhance.Color(image).enhance(1.2)
    image = image.filter(ImageFilter.SHARPEN)

    draw = ImageDraw.Draw(image)
    draw.text((10, 10), "Face Swapped", fill=(255, 255, 255))

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


class OfflineOrchestrator:
    """Stand-in for :class:`~faceswap.orchestrator.JobOrchestrator`.

    Produces a locally rendered placeholder instead of contacting a provider.
    """

    def __init__(self, simulated_latency: float = 1.0) -> None:
        self.simulated_latency = simulated_latency

    async def close(self) -> None:
        """Nothing to release."""

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
        """Render a placeholder result from ``subject``.

        ``style`` is accepted for interface parity and ignored. If the subject
        cannot be decoded its bytes are returned unchanged.
        """
        try:
            async with asyncio.timeout(deadline):
                await asyncio.sleep(self.simulated_latency)
                content_type = "image/jpeg"
                try:
                    data = await asyncio.to_thread(render_placeholder, subject.data)
                except (UnidentifiedImageError, OSError) as e:
                    logger.error(f"Offline face swap error: {e}")
                    data = subject.data
                    content_type = subject.content_type
        except TimeoutError as e:
            raise SwapCancelled(
                f"Face swap exceeded its {deadline}s deadline", cause=e
            ) from e

        filename = subject.filename or "subject.jpg"
        logger.info(f"Offline face swap rendered for {filename}")
        return SwapResult(
            data=data,
            output_url=f"{OFFLINE_URL_SCHEME}{filename}",
            content_type=content_type,
        )

    async def check_service_status(self) -> ServiceStatus:
        return ServiceStatus(
            status=ServiceState.MOCK,
            available=True,
            message="Using mock face swap service",
        )

    async def get_usage_stats(self) -> UsageStats:
        return UsageStats(
            requests_today=0,
            requests_total=0,
            quota_remaining="unlimited",
            mock=True,
        )

    async def list_templates(self) -> list[SwapTemplate]:
        return [template.model_copy() for template in BUILTIN_TEMPLATES]

    def validate_image_for_swap(self, asset: ImageAsset) -> ImageValidation:
        return validate_image_for_swap(asset)
