"""Abstract provider driver definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ProviderRequest:
    """Everything a driver needs to transform one image."""

    image: bytes
    image_mime: str
    prompt: str
    model: str | None = None
    negative_prompt: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    output_mime: str = "image/png"


@dataclass(slots=True)
class ProviderResult:
    """Standard response from provider drivers."""

    payload: bytes
    content_type: str


class ProviderDriver(ABC):
    """Base interface for provider drivers."""

    @abstractmethod
    async def process(self, request: ProviderRequest) -> ProviderResult:
        """Process the request and return payload with its content type."""
