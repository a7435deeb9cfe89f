"""Example usage of the face-swap SDK.

Reads provider settings from the environment (FACE_SWAP_API_URL,
FACE_SWAP_API_KEY, or FACE_SWAP_MODE=offline) and swaps two local photos:

    python examples/swap_usage.py subject.jpg style.jpg swapped.jpg
"""

import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

from faceswap import (
    ConfigurationMissing,
    FaceSwapUnavailable,
    ImageAsset,
    SwapCancelled,
    create_orchestrator,
    prepare_image,
)


def load_asset(path: Path) -> ImageAsset:
    content_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    return ImageAsset(
        data=path.read_bytes(), content_type=content_type, filename=path.name
    )


async def main(subject_path: Path, style_path: Path, output_path: Path) -> int:
    try:
        orchestrator = create_orchestrator()
    except ConfigurationMissing as e:
        print(f"✗ {e}")
        return 2

    async with orchestrator:
        status = await orchestrator.check_service_status()
        print(f"Provider: {status.status.value} ({status.message})")

        subject = load_asset(subject_path)
        validation = orchestrator.validate_image_for_swap(subject)
        if not validation.valid:
            print(f"✗ Subject image rejected: {', '.join(validation.issues)}")
            return 1
        for recommendation in validation.recommendations:
            print(f"  - {recommendation}")

        # Uploads are recompressed to keep provider transfers small
        subject = subject.model_copy(
            update={"data": prepare_image(subject.data), "content_type": "image/jpeg"}
        )

        try:
            result = await orchestrator.perform_swap(
                subject, load_asset(style_path), deadline=120
            )
        except FaceSwapUnavailable as e:
            print(f"✗ {e}")
            return 1
        except SwapCancelled as e:
            print(f"✗ {e}")
            return 1

    output_path.write_bytes(result.data)
    print(f"✓ Swapped image saved to {output_path} (source: {result.output_url})")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(*(Path(arg) for arg in sys.argv[1:]))))
