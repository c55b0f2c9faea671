"""
Classification domain package.

This package contains:

- the image data-URL parser
- the HTS reference sources
- the classification provider (prompt + LLM call)
- the response validator
- the request handler and the HTTP server entrypoint
"""

from .handler import ClassificationHandler, ClassifyOutcome
from .images import ImagePayload, parse_data_url
from .models import (
    ClassificationCandidate,
    ClassificationError,
    ClassificationResponse,
)
from .provider import (
    ClassificationProvider,
    LLMProvider,
    MockClassificationProvider,
)
from .reference import (
    CachedFileReferenceSource,
    FileReferenceSource,
    ReferenceSource,
)
from .validator import parse_llm_response

__all__ = [
    "CachedFileReferenceSource",
    "ClassificationCandidate",
    "ClassificationError",
    "ClassificationHandler",
    "ClassificationProvider",
    "ClassificationResponse",
    "ClassifyOutcome",
    "FileReferenceSource",
    "ImagePayload",
    "LLMProvider",
    "MockClassificationProvider",
    "ReferenceSource",
    "parse_data_url",
    "parse_llm_response",
]
