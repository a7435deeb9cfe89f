"""Typed settings for the face-swap service.

Configuration is read once at process start and used to build the provider
client and orchestrator (:func:`create_orchestrator`), which are then passed
by reference to request handlers.
"""

from __future__ import annotations

import logging
from typing import Literal, Self

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .client.provider import DEFAULT_POLL_BUDGET, AsyncFaceSwapClient
from .errors import ConfigurationMissing
from .offline import OfflineOrchestrator
from .orchestrator import FaceSwapService, JobOrchestrator

logger = logging.getLogger(__name__)


class FaceSwapSettings(BaseSettings):
    """Settings for the face-swap provider."""

    model_config = SettingsConfigDict(
        env_prefix="", extra="ignore", populate_by_name=True
    )

    # "offline" renders placeholders locally and never contacts the provider
    mode: Literal["live", "offline"] = Field(
        default="live", validation_alias="FACE_SWAP_MODE"
    )

    api_url: str | None = Field(default=None, validation_alias="FACE_SWAP_API_URL")
    jobs_api_url: str | None = Field(
        default=None, validation_alias="FACE_SWAP_JOBS_API_URL"
    )
    api_key: str | None = Field(default=None, validation_alias="FACE_SWAP_API_KEY")

    timeout: float = Field(default=30.0, gt=0, validation_alias="FACE_SWAP_TIMEOUT")
    max_retries: int = Field(
        default=3, ge=0, validation_alias="FACE_SWAP_MAX_RETRIES"
    )
    default_poll_budget: int = Field(
        default=DEFAULT_POLL_BUDGET,
        ge=1,
        validation_alias="FACE_SWAP_DEFAULT_POLL_BUDGET",
    )

    @classmethod
    def from_env(cls) -> Self:
        """Load settings from environment variables.

        Equivalent to `FaceSwapSettings()`, spelled out for startup code.
        """
        return cls()

    @property
    def resolved_jobs_api_url(self) -> str | None:
        """Base URL of the job endpoints, defaulting to the API URL."""
        return self.jobs_api_url or self.api_url

    def validate_runtime(self) -> None:
        """Check that live mode has what it needs to reach the provider.

        Raises:
            ConfigurationMissing: If the API URL or key is missing in live mode
        """
        if self.mode == "offline":
            return
        if not self.api_url:
            raise ConfigurationMissing(
                "FACE_SWAP_API_URL environment variable is required"
            )
        if not self.api_key:
            raise ConfigurationMissing(
                "FACE_SWAP_API_KEY environment variable is required "
                "(set FACE_SWAP_MODE=offline to run without a provider)"
            )


def create_orchestrator(settings: FaceSwapSettings | None = None) -> FaceSwapService:
    """Build the face-swap service for this process.

    Args:
        settings: Explicit settings; loaded from the environment when omitted

    Returns:
        A live :class:`JobOrchestrator`, or an :class:`OfflineOrchestrator`
        when ``mode`` is ``offline``

    Raises:
        ConfigurationMissing: If live mode lacks an API URL or key
    """
    settings = settings or FaceSwapSettings.from_env()
    settings.validate_runtime()

    if settings.mode == "offline":
        logger.warning("Face swap running in offline mode; results are placeholders")
        return OfflineOrchestrator()

    client = AsyncFaceSwapClient(
        base_url=settings.api_url or "",
        api_key=settings.api_key or "",
        jobs_base_url=settings.resolved_jobs_api_url,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
        default_poll_budget=settings.default_poll_budget,
    )
    logger.info(f"Face swap provider configured at {client.base_url}")
    return JobOrchestrator(client)
