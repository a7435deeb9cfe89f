"""Core models for the face-swap provider protocol."""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Provider status strings with terminal meaning
PROVIDER_STATUS_COMPLETED = "active"
PROVIDER_STATUS_FAILED = "failed"


class JobState(str, Enum):
    """Interpreted state of a provider-side swap job."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    MALFORMED = "malformed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


class ServiceState(str, Enum):
    """Provider availability as reported by the health probe."""

    ONLINE = "online"
    OFFLINE = "offline"
    MOCK = "mock"


class ImageAsset(BaseModel):
    """In-memory image handed to the orchestrator.

    The buffer is only read; callers keep ownership before and after a swap.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="Raw image bytes")
    content_type: str = Field(
        "image/jpeg", description="Declared MIME type (e.g., 'image/png')"
    )
    filename: Optional[str] = Field(None, description="Original filename hint")
    width: Optional[int] = Field(None, description="Declared width in pixels")
    height: Optional[int] = Field(None, description="Declared height in pixels")

    @property
    def size(self) -> int:
        """Size of the image in bytes."""
        return len(self.data)


class UploadSlot(BaseModel):
    """Provider-issued staging location for one image."""

    upload_url: str = Field(..., description="Pre-signed URL receiving a single PUT")
    resource_url: str = Field(
        ..., description="URL referencing the uploaded image in later calls"
    )


class SwapJob(BaseModel):
    """A provider-side face-swap job."""

    order_id: str = Field(..., description="Opaque provider job identifier")
    max_retries_allowed: int = Field(
        ..., ge=1, description="Maximum number of status polls for this job"
    )


class PollOutcome(BaseModel):
    """Result of a single status poll."""

    state: JobState = Field(..., description="Interpreted job state")
    output_url: Optional[str] = Field(
        None, description="Output image URL, set once the job completed"
    )
    raw_status: Optional[str] = Field(
        None, description="Status string as reported by the provider"
    )

    @classmethod
    def from_status_body(cls, body: Any) -> "PollOutcome":
        """Interpret an ``order-status`` response body.

        An empty or non-object body, and a completed status without an output
        URL, are reported as ``MALFORMED`` so the poll loop skips them.
        """
        if not isinstance(body, dict) or not body:
            return cls(state=JobState.MALFORMED)

        status = body.get("status")
        raw_status = status if isinstance(status, str) else None

        if status == PROVIDER_STATUS_FAILED:
            return cls(state=JobState.FAILED, raw_status=raw_status)

        if status == PROVIDER_STATUS_COMPLETED:
            output = body.get("output")
            if isinstance(output, str) and output:
                return cls(
                    state=JobState.COMPLETED, output_url=output, raw_status=raw_status
                )
            return cls(state=JobState.MALFORMED, raw_status=raw_status)

        if raw_status is None:
            return cls(state=JobState.MALFORMED)

        return cls(state=JobState.PROCESSING, raw_status=raw_status)


class SwapResult(BaseModel):
    """Final output of a completed face swap."""

    data: bytes = Field(..., description="Swapped image bytes")
    output_url: str = Field(..., description="Provider-hosted output URL")
    order_id: Optional[str] = Field(None, description="Provider job identifier")
    content_type: Optional[str] = Field(
        None, description="Content type reported by the output host"
    )


class ServiceStatus(BaseModel):
    """Availability of the face-swap provider."""

    model_config = ConfigDict(extra="allow")

    status: ServiceState = Field(..., description="Provider state")
    available: bool = Field(..., description="Whether swaps can be requested")
    message: str = Field("", description="Human-readable status message")
    error: Optional[str] = Field(None, description="Probe error when offline")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Provider health payload"
    )


class UsageStats(BaseModel):
    """Provider usage counters, best effort."""

    model_config = ConfigDict(extra="allow")

    requests_today: Union[int, str] = Field("N/A", description="Requests today")
    requests_total: Union[int, str] = Field("N/A", description="Requests overall")
    quota_remaining: Union[int, str] = Field(
        "N/A", description="Remaining quota ('unlimited' in offline mode)"
    )
    mock: bool = Field(False, description="Whether the counters are synthetic")
    error: bool = Field(False, description="Whether the usage probe failed")


class SwapTemplate(BaseModel):
    """A face template offered by the provider."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Template identifier")
    name: str = Field(..., description="Display name")
    description: Optional[str] = Field(None, description="Template description")
    thumbnail: Optional[str] = Field(None, description="Thumbnail URL or path")


class ImageValidation(BaseModel):
    """Outcome of the pre-flight image check."""

    valid: bool = Field(True, description="Whether the image can be swapped")
    issues: list[str] = Field(default_factory=list, description="Detected problems")
    recommendations: list[str] = Field(
        default_factory=list, description="Advisory suggestions"
    )
    width: Optional[int] = Field(None, description="Inspected width in pixels")
    height: Optional[int] = Field(None, description="Inspected height in pixels")
