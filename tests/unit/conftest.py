"""Shared fixtures: a scripted in-memory face-swap provider."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from faceswap.client import AsyncFaceSwapClient

API_URL = "https://api.test/v2"
JOBS_API_URL = "https://api.test/v1"
API_KEY = "test-api-key"


class FakeProvider:
    """httpx transport handler emulating the provider protocol.

    Every request is recorded. Responses are scripted through attributes;
    status bodies are consumed in order and default to "processing" once
    exhausted.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.slot_body: dict[str, Any] | None = None
        self.put_status = 200
        self.trigger_status = 200
        self.trigger_body: dict[str, Any] = {"orderId": "J1", "maxRetriesAllowed": 3}
        self.status_bodies: list[Any] = []
        self.status_code = 200
        self.result_status = 200
        self.result_content = b"swapped-image-bytes"
        self.health_status = 200
        self.health_body: dict[str, Any] = {"status": "ok"}
        self.usage_status = 200
        self.usage_body: dict[str, Any] = {
            "requests_today": 4,
            "requests_total": 120,
            "quota_remaining": 880,
        }
        self.templates_body: Any = {"templates": []}
        self._slots = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if method == "POST" and path.endswith("/uploadImageUrl"):
            self._slots += 1
            body = self.slot_body
            if body is None:
                body = {
                    "uploadImage": f"https://upload.test/put/{self._slots}",
                    "imageUrl": f"https://cdn.test/img/{self._slots}.jpg",
                }
            return httpx.Response(200, json={"statusCode": 2000, "body": body})

        if method == "PUT" and request.url.host == "upload.test":
            return httpx.Response(self.put_status)

        if method == "POST" and path.endswith("/face-swap"):
            return httpx.Response(
                self.trigger_status, json={"statusCode": 2000, "body": self.trigger_body}
            )

        if method == "POST" and path.endswith("/order-status"):
            body = self.status_bodies.pop(0) if self.status_bodies else None
            if body is None:
                body = {"status": "processing"}
            return httpx.Response(self.status_code, json={"body": body})

        if method == "GET" and request.url.host == "x":
            return httpx.Response(
                self.result_status,
                content=self.result_content,
                headers={"Content-Type": "image/jpeg"},
            )

        if method == "GET" and path.endswith("/health"):
            return httpx.Response(self.health_status, json=self.health_body)

        if method == "GET" and path.endswith("/usage"):
            return httpx.Response(self.usage_status, json=self.usage_body)

        if method == "GET" and path.endswith("/templates"):
            return httpx.Response(200, json=self.templates_body)

        return httpx.Response(404, json={"message": "not found"})

    def calls(self, suffix: str) -> list[httpx.Request]:
        """Requests whose path ends with ``suffix``."""
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    def sequence(self) -> list[str]:
        """Protocol steps in the order they were requested."""
        steps = []
        for request in self.requests:
            if request.method == "PUT":
                steps.append("put")
            elif request.url.host == "x":
                steps.append("fetch")
            else:
                steps.append(request.url.path.rsplit("/", 1)[-1])
        return steps

    @staticmethod
    def json_of(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def provider() -> FakeProvider:
    """Fresh scripted provider."""
    return FakeProvider()


@pytest.fixture
def client(provider: FakeProvider) -> AsyncFaceSwapClient:
    """Provider client wired to the fake provider, with fast retries."""
    return AsyncFaceSwapClient(
        base_url=API_URL,
        api_key=API_KEY,
        jobs_base_url=JOBS_API_URL,
        max_retries=1,
        retry_initial_delay=0.0,
        retry_randomization=False,
        transport=httpx.MockTransport(provider),
    )
