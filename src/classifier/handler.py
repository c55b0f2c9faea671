"""
Classification Request Handler
==============================

This module defines the `ClassificationHandler`, which turns one raw
``POST /api/classify`` body into a status code and a JSON payload. It brings
together the data-URL parser, the reference source, the prompt builder, the
LLM provider and the response validator.

Every path ends in one of two payload shapes: ``{"results": [...]}`` with
status 200, or ``{"error": ..., "code": ...}`` with a 4xx/5xx status. No
exception escapes `handle`.

The LLM step is attempted at most twice. Any failure of the first attempt
(SDK or network error, non-JSON reply, schema mismatch) triggers exactly one
more identical attempt. A schema mismatch usually repeats with the same
prompt, so the second attempt is often wasted in that case.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass

import structlog
from pydantic import ValidationError

from common.config import Settings
from .images import ImagePayload, parse_data_url
from .models import ClassificationError, ClassifyRequest, ErrorCode
from .prompt import build_user_message
from .provider import LLMProvider
from .reference import ReferenceSource
from .validator import parse_llm_response

log = structlog.get_logger(__name__)

MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class ClassifyOutcome:
    status_code: int
    payload: dict


def error_outcome(code: ErrorCode, message: str, status_code: int) -> ClassifyOutcome:
    return ClassifyOutcome(status_code, {"error": message, "code": code})


class ClassificationHandler:
    """
    Runs the classification pipeline for a single request body.
    """

    def __init__(
        self,
        settings: Settings,
        provider: LLMProvider,
        reference_source: ReferenceSource,
    ):
        self.settings = settings
        self.provider = provider
        self.reference_source = reference_source

    def handle(self, body: bytes | str) -> ClassifyOutcome:
        """
        Validate the request body, classify the image and map the result to
        an HTTP status.
        """
        with structlog.contextvars.bound_contextvars(request_id=uuid.uuid4().hex):
            log.info("Classification request received")
            outcome = self._handle(body)
            log.info(
                "Classification request finished",
                status_code=outcome.status_code,
                code=outcome.payload.get("code"),
            )
            return outcome

    def _handle(self, body: bytes | str) -> ClassifyOutcome:
        if not self.settings.LLM_API_KEY:
            log.error("LLM credential is not configured", provider=self.settings.LLM_PROVIDER)
            return error_outcome("LLM_ERROR", "Server configuration error", 500)

        try:
            data = json.loads(body)
        except (ValueError, RecursionError):
            return error_outcome("INVALID_IMAGE", "Request body must be valid JSON", 400)

        try:
            request = ClassifyRequest.model_validate(data)
        except ValidationError:
            return error_outcome("INVALID_IMAGE", "Missing or invalid `image` field", 400)

        image = parse_data_url(request.image)
        if image is None:
            return error_outcome(
                "INVALID_IMAGE",
                "Image must be a base64 data URL with a supported type (jpeg, png, gif, webp)",
                400,
            )

        if image.approximate_size > self.settings.MAX_IMAGE_BYTES:
            log.warning(
                "Image exceeds size limit",
                approximate_bytes=image.approximate_size,
                max_bytes=self.settings.MAX_IMAGE_BYTES,
            )
            return error_outcome("INVALID_IMAGE", "Image exceeds the 10 MB size limit", 413)

        reference_text = self.reference_source.load()
        return self._classify(image, reference_text)

    def _classify(self, image: ImagePayload, reference_text: str) -> ClassifyOutcome:
        user_message = build_user_message(reference_text)

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                raw_text = self.provider.complete(image, user_message, attempt)
                result = parse_llm_response(raw_text, attempt)
            except Exception as e:
                if attempt < MAX_ATTEMPTS:
                    log.warning(
                        "Classification attempt failed; retrying",
                        attempt=attempt,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    continue
                log.error(
                    "All classification attempts failed",
                    attempts=attempt,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return error_outcome(
                    "LLM_ERROR", "Classification service error - please try again", 500
                )

            if isinstance(result, ClassificationError):
                status_code = 400 if result.code == "INVALID_IMAGE" else 422
                return ClassifyOutcome(status_code, result.model_dump())
            return ClassifyOutcome(200, result.model_dump())

        # Unreachable while MAX_ATTEMPTS >= 1
        raise RuntimeError("Classification loop exited unexpectedly.")
