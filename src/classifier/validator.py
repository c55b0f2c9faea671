"""
LLM Response Validation
=======================

The model's reply is untrusted text. Nothing reaches the client unless it
parses as strict JSON and matches one of the two expected shapes:

- the error shape (``{"error": ..., "code": ...}``), which is the model
  declining to classify and is returned as-is, or
- the success shape (``{"results": [5 candidates]}``).

Anything else raises an `LLMResponseError`, which the request handler treats
as a transient failure worth one retry.
"""

from __future__ import annotations

import json

import structlog
from pydantic import ValidationError

from .models import ClassificationError, ClassificationResponse

log = structlog.get_logger(__name__)

RAW_OUTPUT_PREVIEW_CHARS = 300


class LLMResponseError(ValueError):
    """The model's output could not be turned into a classification."""

    def __init__(self, message: str, attempt: int):
        super().__init__(message)
        self.attempt = attempt


class LLMOutputParseError(LLMResponseError):
    """The model did not return JSON."""

    def __init__(self, raw_text: str, attempt: int):
        self.preview = raw_text[:RAW_OUTPUT_PREVIEW_CHARS]
        super().__init__(
            f"LLM returned non-JSON on attempt {attempt}: {self.preview}", attempt
        )


class LLMSchemaError(LLMResponseError):
    """The model returned JSON with an unexpected shape."""

    def __init__(self, issues: list, attempt: int):
        self.issues = issues
        super().__init__(
            f"LLM response failed schema validation on attempt {attempt}: "
            f"{json.dumps(issues, default=str)}",
            attempt,
        )


def _reject_constant(name: str):
    """NaN and Infinity are not JSON."""
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_llm_response(
    text: str, attempt: int = 1
) -> ClassificationResponse | ClassificationError:
    """
    Parse and validate the raw model output.

    Raises:
        LLMOutputParseError: if the text is empty or not JSON.
        LLMSchemaError: if the JSON matches neither expected shape.
    """
    raw = text.strip()
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        raise LLMOutputParseError(raw, attempt) from None

    try:
        declined = ClassificationError.model_validate(data)
    except ValidationError:
        pass
    else:
        log.info(
            "Model declined to classify", attempt=attempt, code=declined.code
        )
        return declined

    try:
        return ClassificationResponse.model_validate(data)
    except ValidationError as e:
        issues = e.errors(
            include_url=False, include_context=False, include_input=False
        )
        raise LLMSchemaError(issues, attempt) from None
