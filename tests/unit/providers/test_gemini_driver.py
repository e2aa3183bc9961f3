from __future__ import annotations

import base64
from typing import Any

import httpx
import pytest

from imageai.config import GeminiSettings
from imageai.exceptions import ProviderError
from imageai.providers.providers_base import ProviderRequest
from imageai.providers.providers_gemini import (
    GeminiDriver,
    build_request_body,
    parse_response,
)
from tests.helpers.app_factory import JPEG_BYTES, PNG_BYTES


class DummyResponse:
    def __init__(
        self, status_code: int, json_data: dict[str, Any] | None = None, text: str = ""
    ) -> None:
        self.status_code = status_code
        self._json_data = json_data
        self.text = text

    def json(self) -> dict[str, Any]:
        if self._json_data is None:
            raise ValueError("no json")
        return self._json_data


class DummyAsyncClient:
    def __init__(self, responses: list[DummyResponse | Exception]) -> None:
        self._responses = responses
        self.requests: list[dict[str, Any]] = []

    async def __aenter__(self) -> "DummyAsyncClient":  # pragma: no cover - helper
        return self

    async def __aexit__(
        self, exc_type, exc_value, traceback
    ) -> None:  # pragma: no cover - helper
        return None

    async def post(
        self, url: str, headers: dict[str, str], json: dict[str, Any]
    ) -> DummyResponse:
        self.requests.append({"url": url, "headers": headers, "json": json})
        if not self._responses:
            raise RuntimeError("No more responses queued")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def image_response(payload: bytes = PNG_BYTES, mime: str = "image/png") -> DummyResponse:
    return DummyResponse(
        200,
        {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {"text": "done"},
                            {
                                "inlineData": {
                                    "mimeType": mime,
                                    "data": base64.b64encode(payload).decode("ascii"),
                                }
                            },
                        ]
                    }
                }
            ]
        },
    )


def make_request(**overrides) -> ProviderRequest:
    values: dict[str, Any] = {
        "image": JPEG_BYTES,
        "image_mime": "image/jpeg",
        "prompt": "make it retro",
    }
    values.update(overrides)
    return ProviderRequest(**values)


@pytest.fixture
def driver() -> GeminiDriver:
    return GeminiDriver(GeminiSettings(api_key="test-key", api_base="https://gemini.test/v1beta/"))


def install_client(monkeypatch, client: DummyAsyncClient) -> None:
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)


@pytest.mark.asyncio
async def test_process_returns_inline_image(monkeypatch, driver) -> None:
    client = DummyAsyncClient([image_response()])
    install_client(monkeypatch, client)

    result = await driver.process(make_request(model="gemini-test"))

    assert result.payload == PNG_BYTES
    assert result.content_type == "image/png"
    request = client.requests[0]
    assert request["url"] == "https://gemini.test/v1beta/models/gemini-test:generateContent"
    assert request["headers"]["x-goog-api-key"] == "test-key"
    parts = request["json"]["contents"][0]["parts"]
    assert parts[0]["inline_data"]["mime_type"] == "image/jpeg"
    assert base64.b64decode(parts[0]["inline_data"]["data"]) == JPEG_BYTES
    assert parts[1]["text"] == "make it retro"


@pytest.mark.asyncio
async def test_process_uses_default_model(monkeypatch, driver) -> None:
    client = DummyAsyncClient([image_response()])
    install_client(monkeypatch, client)

    await driver.process(make_request())

    assert "/models/gemini-2.5-flash-image:generateContent" in client.requests[0]["url"]


@pytest.mark.asyncio
async def test_process_without_api_key_fails_fast() -> None:
    driver = GeminiDriver(GeminiSettings(api_key=None))

    with pytest.raises(ProviderError, match="GEMINI_API_KEY"):
        await driver.process(make_request())


@pytest.mark.asyncio
async def test_process_rejects_empty_prompt(driver) -> None:
    with pytest.raises(ProviderError, match="prompt"):
        await driver.process(make_request(prompt="  "))


@pytest.mark.asyncio
async def test_process_surfaces_provider_error_message(monkeypatch, driver) -> None:
    client = DummyAsyncClient(
        [
            DummyResponse(
                400,
                {"error": {"status": "INVALID_ARGUMENT", "message": "bad image"}},
                text="bad",
            )
        ]
    )
    install_client(monkeypatch, client)

    with pytest.raises(ProviderError) as exc_info:
        await driver.process(make_request())

    assert "status=400" in exc_info.value.message
    assert "INVALID_ARGUMENT bad image" in exc_info.value.message
    assert len(client.requests) == 1


@pytest.mark.asyncio
async def test_process_wraps_transport_errors(monkeypatch, driver) -> None:
    client = DummyAsyncClient([httpx.ConnectTimeout("timed out")])
    install_client(monkeypatch, client)

    with pytest.raises(ProviderError, match="HTTP error"):
        await driver.process(make_request())


@pytest.mark.asyncio
async def test_process_rejects_non_json_body(monkeypatch, driver) -> None:
    install_client(monkeypatch, DummyAsyncClient([DummyResponse(200, None, text="<html>")]))

    with pytest.raises(ProviderError, match="not valid JSON"):
        await driver.process(make_request())


def test_build_request_body_includes_negative_prompt_and_config() -> None:
    body = build_request_body(
        make_request(
            negative_prompt="blur",
            parameters={"generationConfig": {"temperature": 0.2}, "safetySettings": [{"x": 1}]},
        )
    )

    assert body["contents"][0]["parts"][1]["text"] == "make it retro\n\nAvoid: blur"
    assert body["generationConfig"] == {"temperature": 0.2}
    assert body["safetySettings"] == [{"x": 1}]


def test_build_request_body_omits_empty_config() -> None:
    body = build_request_body(make_request())

    assert "generationConfig" not in body
    assert "safetySettings" not in body


def test_parse_response_accepts_snake_case_inline_data() -> None:
    data = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {
                            "inline_data": {
                                "mime_type": "image/jpeg",
                                "data": base64.b64encode(JPEG_BYTES).decode("ascii"),
                            }
                        }
                    ]
                }
            }
        ]
    }

    result = parse_response(data, fallback_mime="image/png")

    assert result.payload == JPEG_BYTES
    assert result.content_type == "image/jpeg"


def test_parse_response_reports_finish_message() -> None:
    data = {"candidates": [{"finishReason": "SAFETY", "finishMessage": "blocked by safety"}]}

    with pytest.raises(ProviderError, match="blocked by safety"):
        parse_response(data, fallback_mime="image/png")


def test_parse_response_reports_finish_reason() -> None:
    data = {"candidates": [{"finishReason": "IMAGE_OTHER", "content": {"parts": [{"text": "no"}]}}]}

    with pytest.raises(ProviderError, match="IMAGE_OTHER"):
        parse_response(data, fallback_mime="image/png")


def test_parse_response_without_candidates() -> None:
    with pytest.raises(ProviderError, match="does not contain inline data"):
        parse_response({}, fallback_mime="image/png")
