"""Local image helpers: pre-flight validation and recompression.

Nothing in this module touches the network.
"""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from .errors import InvalidImageError
from .models.api import ImageAsset, ImageValidation

logger = logging.getLogger(__name__)

MIN_DIMENSION = 200
MIN_ASPECT_RATIO = 0.5
MAX_ASPECT_RATIO = 2.0
MIN_BYTES_PER_PIXEL = 0.5


def _read_dimensions(asset: ImageAsset) -> tuple[int, int]:
    if asset.width is not None and asset.height is not None:
        return asset.width, asset.height
    with Image.open(io.BytesIO(asset.data)) as image:
        return image.size


def validate_image_for_swap(asset: ImageAsset) -> ImageValidation:
    """Check whether an image is suitable for a face swap.

    Uses the declared dimensions when both are present, otherwise reads them
    from the image header.

    - width or height below 200 pixels: invalid
    - aspect ratio outside [0.5, 2.0]: still valid, flagged
    - fewer than 0.5 bytes per pixel: recommendation only

    Args:
        asset: Image to inspect

    Returns:
        ImageValidation: Verdict with issues and recommendations
    """
    try:
        width, height = _read_dimensions(asset)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.error(f"Image validation error: {e}")
        return ImageValidation(
            valid=False,
            issues=["Unable to process image"],
            recommendations=["Please ensure the image is valid and not corrupted"],
        )

    validation = ImageValidation(width=width, height=height)

    if width < MIN_DIMENSION or height < MIN_DIMENSION:
        validation.valid = False
        validation.issues.append(
            f"Image resolution too low (minimum {MIN_DIMENSION}x{MIN_DIMENSION})"
        )

    if width <= 0 or height <= 0:
        return validation

    aspect_ratio = width / height
    if aspect_ratio < MIN_ASPECT_RATIO or aspect_ratio > MAX_ASPECT_RATIO:
        validation.issues.append("Unusual aspect ratio may affect quality")
        validation.recommendations.append("Use images with more standard proportions")

    bytes_per_pixel = asset.size / (width * height)
    if bytes_per_pixel < MIN_BYTES_PER_PIXEL:
        validation.recommendations.append(
            "Image appears heavily compressed, results may vary"
        )

    return validation


def prepare_image(
    data: bytes,
    max_width: int = 800,
    max_height: int = 600,
    quality: int = 85,
) -> bytes:
    """Shrink an image to fit the given bounds and re-encode it as JPEG.

    Images already inside the bounds keep their size.

    Raises:
        InvalidImageError: If the bytes are not a decodable image
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            image.thumbnail((max_width, max_height))
            if image.mode != "RGB":
                image = image.convert("RGB")
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=quality, progressive=True)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError("Invalid image file", cause=e) from e

    return buffer.getvalue()
