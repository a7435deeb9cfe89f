"""Exceptions raised by the face-swap SDK.

Callers of :class:`~faceswap.orchestrator.JobOrchestrator` only ever see
:class:`FaceSwapUnavailable`, :class:`SwapCancelled` and
:class:`ConfigurationMissing`. The :class:`ProviderError` subclasses describe
which protocol step failed and are attached to ``FaceSwapUnavailable.reason``
for diagnostics.
"""

from __future__ import annotations


class FaceSwapError(Exception):
    """Base exception for face-swap SDK errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationMissing(FaceSwapError):
    """Required provider configuration (API key or URL) is absent."""


class InvalidImageError(FaceSwapError):
    """Image bytes could not be decoded."""


class ProviderError(FaceSwapError):
    """A step of the provider protocol failed."""

    step = "provider"


class UploadSlotUnavailable(ProviderError):
    """Provider did not return both an upload URL and a resource URL."""

    step = "upload_slot"


class UploadTransferFailed(ProviderError):
    """PUT of the image bytes to the upload URL failed."""

    step = "upload_transfer"


class JobCreationFailed(ProviderError):
    """Provider did not return an order id for the swap job."""

    step = "job_creation"


class JobStatusUnavailable(ProviderError):
    """A status poll could not reach the provider."""

    step = "job_status"


class JobFailed(ProviderError):
    """Provider reported the swap job as failed."""

    step = "job_status"

    def __init__(
        self, message: str, order_id: str, cause: Exception | None = None
    ) -> None:
        super().__init__(message, cause)
        self.order_id = order_id


class JobTimedOut(ProviderError):
    """Poll budget was exhausted before the job reached a terminal state."""

    step = "job_status"

    def __init__(self, message: str, order_id: str, attempts: int) -> None:
        super().__init__(message)
        self.order_id = order_id
        self.attempts = attempts


class ResultFetchFailed(ProviderError):
    """Downloading the swapped image from the output URL failed."""

    step = "result_fetch"


class FaceSwapUnavailable(FaceSwapError):
    """The face swap could not be produced; callers should retry later."""

    def __init__(self, message: str, reason: ProviderError | None = None) -> None:
        super().__init__(message, cause=reason)
        self.reason = reason


class SwapCancelled(FaceSwapError):
    """The swap workflow was abandoned because its deadline expired."""
