"""Gemini provider driver implementation."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..config import GeminiSettings
from ..exceptions import ProviderError
from .providers_base import ProviderDriver, ProviderRequest, ProviderResult

logger = logging.getLogger(__name__)

_BODY_PREVIEW_LIMIT = 4000


@dataclass(slots=True)
class GeminiDriver(ProviderDriver):
    """Call Gemini ``generateContent`` with one inline image and a text prompt."""

    settings: GeminiSettings

    async def process(self, request: ProviderRequest) -> ProviderResult:
        api_key = self.settings.api_key
        if not api_key:
            raise ProviderError("GEMINI_API_KEY is not configured")
        if not request.prompt.strip():
            raise ProviderError("template prompt is empty")

        model = request.model or self.settings.default_model
        base = self.settings.api_base.rstrip("/")
        url = f"{base}/models/{model}:generateContent"
        headers = {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }
        body = build_request_body(request)

        logger.info(
            "gemini.request.start",
            extra={
                "model": model,
                "payload_bytes": len(request.image),
                "payload_mime": request.image_mime,
                "prompt_len": len(request.prompt),
            },
        )
        try:
            response = await self._post(url, headers=headers, json=body)
        except httpx.HTTPError as exc:
            logger.error("gemini.request.http_error %s", exc, extra={"model": model})
            raise ProviderError(f"Gemini HTTP error: {exc}") from exc

        if response.status_code != 200:
            error_detail = _extract_error(response)
            logger.error(
                "gemini.response.error status=%s detail=%s",
                response.status_code,
                error_detail,
                extra={"body_preview": response.text[:500]},
            )
            raise ProviderError(
                f"Gemini request failed (status={response.status_code}): {error_detail}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError("Gemini response is not valid JSON") from exc

        body_preview = json.dumps(_mask_inline_data(data), ensure_ascii=False)
        if len(body_preview) > _BODY_PREVIEW_LIMIT:
            body_preview = body_preview[:_BODY_PREVIEW_LIMIT] + "...(truncated)"
        logger.debug("gemini.response.body %s", body_preview)

        result = parse_response(data, fallback_mime=request.output_mime)
        logger.info(
            "gemini.request.success",
            extra={
                "model": model,
                "result_bytes": len(result.payload),
                "content_type": result.content_type,
            },
        )
        return result

    async def _post(
        self, url: str, *, headers: dict[str, str], json: dict[str, Any]
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.settings.timeout_seconds) as client:
            return await client.post(url, headers=headers, json=json)


def build_request_body(request: ProviderRequest) -> dict[str, Any]:
    prompt = request.prompt
    if request.negative_prompt:
        prompt = f"{prompt}\n\nAvoid: {request.negative_prompt}"
    body: dict[str, Any] = {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {
                        "inline_data": {
                            "mime_type": request.image_mime,
                            "data": base64.b64encode(request.image).decode("ascii"),
                        }
                    },
                    {"text": prompt},
                ],
            }
        ],
    }
    generation_config = request.parameters.get("generationConfig") or request.parameters.get(
        "generation_config"
    )
    if isinstance(generation_config, dict) and generation_config:
        body["generationConfig"] = generation_config
    safety_settings = request.parameters.get("safetySettings") or request.parameters.get(
        "safety_settings"
    )
    if safety_settings:
        body["safetySettings"] = safety_settings
    return body


def parse_response(data: dict[str, Any], *, fallback_mime: str) -> ProviderResult:
    """Return the first inline image, or raise with the provider's reason."""
    candidates = data.get("candidates") or []
    for candidate in candidates:
        content = candidate.get("content") or {}
        for part in content.get("parts", []):
            inline = part.get("inline_data") or part.get("inlineData")
            if inline and inline.get("data"):
                mime = inline.get("mime_type") or inline.get("mimeType") or fallback_mime
                try:
                    payload = base64.b64decode(inline["data"], validate=True)
                except (KeyError, ValueError) as exc:
                    raise ProviderError("Gemini response payload is invalid") from exc
                return ProviderResult(payload=payload, content_type=mime)

    first = candidates[0] if candidates else {}
    finish_message = first.get("finishMessage") or first.get("finish_message")
    finish_reason = first.get("finishReason") or first.get("finish_reason")
    logger.warning(
        "gemini.response.no_inline_data",
        extra={"finish_reason": finish_reason, "finish_message": finish_message},
    )
    if finish_message:
        raise ProviderError(finish_message)
    if finish_reason:
        raise ProviderError(f"Gemini response has no image (finish_reason={finish_reason})")
    raise ProviderError("Gemini response does not contain inline data")


def _extract_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        message = (error.get("message") or "").strip()
        status = (error.get("status") or "").strip()
        return " ".join(part for part in (status, message) if part)
    return str(data)


def _mask_inline_data(obj: Any) -> Any:
    """Remove inline_data payloads to avoid logging base64 blobs."""
    if isinstance(obj, dict):
        result = {}
        for key, value in obj.items():
            if key in {"inline_data", "inlineData"} and isinstance(value, dict):
                result[key] = {k: v for k, v in value.items() if k != "data"}
            else:
                result[key] = _mask_inline_data(value)
        return result
    if isinstance(obj, list):
        return [_mask_inline_data(item) for item in obj]
    return obj


__all__ = ["GeminiDriver", "build_request_body", "parse_response"]
