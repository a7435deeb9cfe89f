"""Face-swap provider client.

Example:
    >>> from faceswap.client import AsyncFaceSwapClient
    >>> async with AsyncFaceSwapClient(
    ...     base_url="https://api.example.com/v2", api_key="..."
    ... ) as client:
    ...     status = await client.health()
"""

from .base import BaseAsyncClient
from .provider import AsyncFaceSwapClient

__all__ = [
    "BaseAsyncClient",
    "AsyncFaceSwapClient",
]
