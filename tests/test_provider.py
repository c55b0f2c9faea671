import json
import os

import httpx
import openai
import pytest

from classifier.images import ImagePayload
from classifier.prompt import SYSTEM_PROMPT
from classifier.provider import (
    ClassificationProvider,
    MockClassificationProvider,
    build_provider,
)
from common.config import Settings

IMAGE = ImagePayload(media_type="image/png", base64_data="iVBORw0KGgo=")


@pytest.fixture
def settings(mocker):
    """Fixture to create a Settings object for tests."""
    mocker.patch.dict(
        os.environ,
        {
            "OPENAI_API_KEY": "test_api_key",
            "CLASSIFY_MODEL": "vision-model",
        },
        clear=True,
    )
    return Settings()


@pytest.fixture
def mock_openai(mocker):
    """Fixture to mock the OpenAI API client."""
    return mocker.patch("openai.chat.completions.create")


def create_mock_response(mocker, content):
    """Helper to create a mock OpenAI API response."""
    mock_choice = mocker.MagicMock()
    mock_choice.message.content = content
    mock_response = mocker.MagicMock()
    mock_response.choices = [mock_choice]
    return mock_response


def create_connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(
        request=httpx.Request("POST", "https://example.com")
    )


def test_complete_sends_image_and_prompt(settings, mock_openai, mocker):
    mock_openai.return_value = create_mock_response(mocker, '  {"results": []}\n')
    provider = ClassificationProvider(settings)

    text = provider.complete(IMAGE, "classify this", attempt=1)

    assert text == '{"results": []}'
    mock_openai.assert_called_once()
    kwargs = mock_openai.call_args.kwargs
    assert kwargs["model"] == "vision-model"
    assert kwargs["max_tokens"] == 2048
    assert kwargs["timeout"] == 180
    system, user = kwargs["messages"]
    assert system == {"role": "system", "content": SYSTEM_PROMPT}
    assert user["role"] == "user"
    assert user["content"][0] == {
        "type": "image_url",
        "image_url": {"url": "data:image/png;base64,iVBORw0KGgo="},
    }
    assert user["content"][1] == {"type": "text", "text": "classify this"}


def test_complete_omits_timeout_when_disabled(settings, mock_openai, mocker):
    settings.REQUEST_TIMEOUT = 0
    mock_openai.return_value = create_mock_response(mocker, "{}")

    ClassificationProvider(settings).complete(IMAGE, "x", attempt=1)

    assert "timeout" not in mock_openai.call_args.kwargs


@pytest.mark.parametrize("content", [None, ""])
def test_complete_returns_empty_string_without_text(settings, mock_openai, mocker, content):
    mock_openai.return_value = create_mock_response(mocker, content)

    assert ClassificationProvider(settings).complete(IMAGE, "x", attempt=1) == ""


def test_complete_returns_empty_string_without_choices(settings, mock_openai, mocker):
    response = mocker.MagicMock()
    response.choices = []
    mock_openai.return_value = response

    assert ClassificationProvider(settings).complete(IMAGE, "x", attempt=1) == ""


def test_complete_does_not_retry_api_errors(settings, mock_openai):
    mock_openai.side_effect = create_connection_error()

    with pytest.raises(openai.APIConnectionError):
        ClassificationProvider(settings).complete(IMAGE, "x", attempt=1)

    assert mock_openai.call_count == 1


def test_mock_provider_returns_valid_canned_results(settings):
    sleeps = []
    settings.MOCK_DELAY_SECONDS = 1.5
    provider = MockClassificationProvider(settings, sleep=sleeps.append)

    payload = json.loads(provider.complete(IMAGE, "x", attempt=1))

    assert sleeps == [1.5]
    assert [c["rank"] for c in payload["results"]] == [1, 2, 3, 4, 5]


def test_build_provider_selects_by_setting(settings):
    assert type(build_provider(settings)) is ClassificationProvider

    settings.LLM_PROVIDER = "ollama"
    assert type(build_provider(settings)) is ClassificationProvider

    settings.LLM_PROVIDER = "mock"
    assert type(build_provider(settings)) is MockClassificationProvider
