"""
Image data URLs.

Clients upload the photo as a ``data:<media type>;base64,<payload>`` string.
This module turns that string into an `ImagePayload` the LLM provider can
forward, without decoding the image itself.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

SUPPORTED_MEDIA_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    }
)

# Non-standard but common in the wild
MEDIA_TYPE_ALIASES = {"image/jpg": "image/jpeg"}

DATA_URL_RE = re.compile(r"data:([^;]+);base64,(.+)")


@dataclass(frozen=True)
class ImagePayload:
    media_type: str
    base64_data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.base64_data}"

    @property
    def approximate_size(self) -> int:
        return approximate_decoded_size(self.base64_data)


def parse_data_url(value: object) -> ImagePayload | None:
    """
    Parse a base64 image data URL, returning None when it is malformed or
    the media type is not supported.
    """
    if not isinstance(value, str):
        return None
    match = DATA_URL_RE.fullmatch(value)
    if match is None:
        return None

    media_type = MEDIA_TYPE_ALIASES.get(match.group(1), match.group(1))
    if media_type not in SUPPORTED_MEDIA_TYPES:
        return None
    return ImagePayload(media_type=media_type, base64_data=match.group(2))


def approximate_decoded_size(base64_data: str) -> int:
    """Estimate the decoded byte size of a base64 string (length * 0.75)."""
    return math.ceil(len(base64_data) * 0.75)
