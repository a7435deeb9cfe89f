"""Face-swap SDK models."""

from .api import (
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

__all__ = [
    # Protocol models
    "ImageAsset",
    "UploadSlot",
    "SwapJob",
    "JobState",
    "PollOutcome",
    "SwapResult",
    # Auxiliary models
    "ServiceState",
    "ServiceStatus",
    "UsageStats",
    "SwapTemplate",
    "ImageValidation",
]
