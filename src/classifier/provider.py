"""
Classification Providers
========================

A provider performs exactly one multimodal completion: it sends the product
photo plus the prompt to the model and hands back the raw reply text. It does
not parse or retry; the request handler owns both concerns.

`ClassificationProvider` talks to any OpenAI-compatible chat completion
endpoint (OpenAI itself or Ollama). `MockClassificationProvider` is a
development double that answers with canned candidates after a short delay.
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod

import structlog

from common.config import Settings
from common.llm import OpenAIChatMixin
from .images import ImagePayload
from .prompt import SYSTEM_PROMPT

log = structlog.get_logger(__name__)


class LLMProvider(ABC):
    """Abstract base class for classification providers."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    def complete(self, image: ImagePayload, user_message: str, attempt: int) -> str:
        """
        Run one completion for the image and return the raw reply text.

        ``attempt`` is only used for logging.
        """
        raise NotImplementedError


class ClassificationProvider(OpenAIChatMixin, LLMProvider):
    """A provider that uses the OpenAI-compatible chat completion API."""

    def complete(self, image: ImagePayload, user_message: str, attempt: int) -> str:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": image.data_url},
                    },
                    {"type": "text", "text": user_message},
                ],
            },
        ]
        params = {
            "model": self.settings.CLASSIFY_MODEL,
            "messages": messages,
            "max_tokens": self.settings.CLASSIFY_MAX_TOKENS,
        }

        start = time.monotonic()
        response = self._create_completion(**params)
        duration_ms = int((time.monotonic() - start) * 1000)
        log.info(
            "LLM call completed",
            attempt=attempt,
            model=self.settings.CLASSIFY_MODEL,
            duration_ms=duration_ms,
        )

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()


MOCK_RESULTS = [
    {
        "rank": 1,
        "htsCode": "6109.10.0012",
        "description": "T-shirts, knitted or crocheted, of cotton, men's or boys'",
        "confidence": 0.82,
        "reasoning": "The garment appears to be a knitted cotton crew-neck top.",
        "dutyRate": "Free",
        "costEffectivenessNote": "Lowest duty if the fabric is confirmed as cotton knit.",
    },
    {
        "rank": 2,
        "htsCode": "6109.90.1009",
        "description": "T-shirts, knitted or crocheted, of man-made fibres",
        "confidence": 0.41,
        "reasoning": "Applies if the fibre content is mainly synthetic.",
        "dutyRate": "2.5%",
        "costEffectivenessNote": "Small increase over cotton; verify fibre content.",
    },
    {
        "rank": 3,
        "htsCode": "6110.20.2079",
        "description": "Pullovers and similar articles, knitted, of cotton",
        "confidence": 0.27,
        "reasoning": "Heavier knits with long sleeves may fall under heading 6110.",
        "dutyRate": "4.9%",
        "costEffectivenessNote": "Moderate duty; only if the garment is a sweater type.",
    },
    {
        "rank": 4,
        "htsCode": "6205.20.2016",
        "description": "Men's or boys' shirts, not knitted, of cotton",
        "confidence": 0.12,
        "reasoning": "Woven cotton shirts share a similar appearance in photos.",
        "dutyRate": "8.3%",
        "costEffectivenessNote": "Noticeably higher duty for woven construction.",
    },
    {
        "rank": 5,
        "htsCode": "6114.30.1060",
        "description": "Other garments, knitted or crocheted, of man-made fibres",
        "confidence": 0.05,
        "reasoning": "Residual heading if the item is not a T-shirt or pullover.",
        "dutyRate": "14.9%",
        "costEffectivenessNote": "Highest duty; avoid unless no other heading applies.",
    },
]


class MockClassificationProvider(LLMProvider):
    """Returns canned candidates after ``MOCK_DELAY_SECONDS``; for local development."""

    def __init__(self, settings: Settings, sleep=time.sleep):
        super().__init__(settings)
        self._sleep = sleep

    def complete(self, image: ImagePayload, user_message: str, attempt: int) -> str:
        log.warning(
            "Mock provider in use; returning canned results",
            attempt=attempt,
            media_type=image.media_type,
        )
        self._sleep(self.settings.MOCK_DELAY_SECONDS)
        return json.dumps({"results": MOCK_RESULTS})


def build_provider(settings: Settings) -> LLMProvider:
    """Return the provider selected by ``LLM_PROVIDER``."""
    if settings.LLM_PROVIDER == "mock":
        return MockClassificationProvider(settings)
    return ClassificationProvider(settings)
