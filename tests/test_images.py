import base64
from io import BytesIO

import pytest
from PIL import Image

from classifier.images import (
    ImagePayload,
    approximate_decoded_size,
    parse_data_url,
)


def create_test_image_b64(format="PNG"):
    """Helper to create a small real image encoded as base64."""
    buffer = BytesIO()
    Image.new("RGB", (8, 8), "black").save(buffer, format=format)
    return base64.b64encode(buffer.getvalue()).decode()


@pytest.mark.parametrize(
    "media_type, pil_format",
    [
        ("image/jpeg", "JPEG"),
        ("image/png", "PNG"),
        ("image/gif", "GIF"),
        ("image/webp", "WEBP"),
    ],
)
def test_parse_data_url_accepts_supported_types(media_type, pil_format):
    payload = create_test_image_b64(pil_format)

    result = parse_data_url(f"data:{media_type};base64,{payload}")

    assert result == ImagePayload(media_type=media_type, base64_data=payload)


def test_parse_data_url_normalises_jpg_alias():
    payload = create_test_image_b64("JPEG")

    result = parse_data_url(f"data:image/jpg;base64,{payload}")

    assert result is not None
    assert result.media_type == "image/jpeg"
    assert result.data_url == f"data:image/jpeg;base64,{payload}"


@pytest.mark.parametrize(
    "value",
    [
        "not-a-data-url",
        "",
        "data:image/png;base64,",
        "data:image/png,iVBORw0KGgo=",
        "data:;base64,iVBORw0KGgo=",
        "data:image/svg+xml;base64,PHN2Zz48L3N2Zz4=",
        "data:application/pdf;base64,JVBERi0=",
        "data:image/PNG;base64,iVBORw0KGgo=",
        "prefix data:image/png;base64,iVBORw0KGgo=",
        "data:image/png;base64,iVBORw0KGgo=\n",
        "data:image/png;charset=utf-8;base64,iVBORw0KGgo=",
    ],
)
def test_parse_data_url_rejects_everything_else(value):
    assert parse_data_url(value) is None


@pytest.mark.parametrize("value", [None, 42, b"data:image/png;base64,AAAA", ["x"]])
def test_parse_data_url_is_total_over_non_strings(value):
    assert parse_data_url(value) is None


def test_approximate_decoded_size_rounds_up():
    assert approximate_decoded_size("") == 0
    assert approximate_decoded_size("AAAA") == 3
    assert approximate_decoded_size("AAAAA") == 4  # 3.75 -> 4


def test_image_payload_is_immutable():
    payload = ImagePayload(media_type="image/png", base64_data="AAAA")

    with pytest.raises(AttributeError):
        payload.media_type = "image/gif"
