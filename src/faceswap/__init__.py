"""Face-swap SDK - drive an external face-swap provider from Python.

The SDK provides:

1. **Models**: image assets, upload slots, swap jobs and results
2. **Provider client**: async httpx client for the provider HTTP API
3. **Orchestrator**: the upload → trigger → poll → fetch workflow with a
   single caller-visible failure (``FaceSwapUnavailable``)

Example:
    >>> from faceswap import ImageAsset, create_orchestrator
    >>> orchestrator = create_orchestrator()
    >>> result = await orchestrator.perform_swap(
    ...     ImageAsset(data=subject_bytes, content_type="image/jpeg"),
    ...     ImageAsset(data=style_bytes, content_type="image/png"),
    ... )
    >>> result.output_url
"""

from .client import AsyncFaceSwapClient, BaseAsyncClient
from .errors import (
    ConfigurationMissing,
    FaceSwapError,
    FaceSwapUnavailable,
    InvalidImageError,
    JobCreationFailed,
    JobFailed,
    JobStatusUnavailable,
    JobTimedOut,
    ProviderError,
    ResultFetchFailed,
    SwapCancelled,
    UploadSlotUnavailable,
    UploadTransferFailed,
)
from .images import prepare_image, validate_image_for_swap
from .models import (
    ImageAsset,
    ImageValidation,
    JobState,
    PollOutcome,
    ServiceState,
    ServiceStatus,
    SwapJob,
    SwapResult,
    SwapTemplate,
    UploadSlot,
    UsageStats,
)
from .offline import OfflineOrchestrator
from .orchestrator import FaceSwapService, JobOrchestrator
from .settings import FaceSwapSettings, create_orchestrator

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Models
    "ImageAsset",
    "ImageValidation",
    "JobState",
    "PollOutcome",
    "ServiceState",
    "ServiceStatus",
    "SwapJob",
    "SwapResult",
    "SwapTemplate",
    "UploadSlot",
    "UsageStats",
    # Client
    "BaseAsyncClient",
    "AsyncFaceSwapClient",
    # Orchestration
    "FaceSwapService",
    "JobOrchestrator",
    "OfflineOrchestrator",
    "FaceSwapSettings",
    "create_orchestrator",
    # Image helpers
    "prepare_image",
    "validate_image_for_swap",
    # Errors
    "FaceSwapError",
    "FaceSwapUnavailable",
    "SwapCancelled",
    "ConfigurationMissing",
    "InvalidImageError",
    "ProviderError",
    "UploadSlotUnavailable",
    "UploadTransferFailed",
    "JobCreationFailed",
    "JobFailed",
    "JobStatusUnavailable",
    "JobTimedOut",
    "ResultFetchFailed",
]

# Package metadata
__title__ = "faceswap-sdk"
__description__ = "Python SDK for orchestrating external face-swap provider jobs"
__license__ = "Apache 2.0"
