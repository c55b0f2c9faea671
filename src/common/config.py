"""
Configuration module for the HTS image classification service.

This module centralizes the loading and validation of all configuration
parameters from environment variables. It provides a single `Settings`
class that acts as a container for all configurable values, ensuring
that they are defined in one place and can be easily imported and used
throughout the application.
"""

import os
from pathlib import Path
from typing import Literal

import openai

DEFAULT_HTS_DOCUMENT_NAME = "hts-document.txt"
MAX_IMAGE_BYTES = 10 * 1024 * 1024

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings:
    """
    A container for all configuration settings, loaded from environment variables.

    Unlike most values here, the LLM credential is allowed to be missing at
    startup: the request handler reports it per request as a server error.
    """

    # --- LLM Provider Configuration ---
    LLM_PROVIDER: Literal["openai", "ollama", "mock"]
    OLLAMA_BASE_URL: str | None
    OPENAI_API_KEY: str | None
    LLM_API_KEY: str | None

    # --- Model Selection ---
    CLASSIFY_MODEL: str
    CLASSIFY_MAX_TOKENS: int
    REQUEST_TIMEOUT: int
    MOCK_DELAY_SECONDS: float

    # --- HTS Reference Document ---
    HTS_DOCUMENT_PATH: Path
    HTS_DOCUMENT_CACHE: bool

    # --- HTTP Server ---
    SERVER_HOST: str
    SERVER_PORT: int

    # --- Logging ---
    LOG_LEVEL: str
    LOG_FORMAT: Literal["console", "json"]

    # --- Constants ---
    MAX_IMAGE_BYTES: int = MAX_IMAGE_BYTES

    def __init__(self):
        """
        Loads settings from environment variables and performs validation.
        """
        # --- LLM Provider Configuration ---
        self.LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").strip().lower()
        if self.LLM_PROVIDER not in ("openai", "ollama", "mock"):
            raise ValueError("LLM_PROVIDER must be 'openai', 'ollama' or 'mock'")

        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY") or None

        # --- Model Selection ---
        if self.LLM_PROVIDER == "ollama":
            self.OLLAMA_BASE_URL = os.getenv(
                "OLLAMA_BASE_URL", "http://localhost:11434/v1/"
            )
            self.LLM_API_KEY = "dummy"  # Ollama ignores the key
            default_model = "gemma3:27b"
        elif self.LLM_PROVIDER == "mock":
            self.OLLAMA_BASE_URL = None
            self.LLM_API_KEY = "mock"
            default_model = "mock"
        else:  # openai
            self.OLLAMA_BASE_URL = None
            self.LLM_API_KEY = self.OPENAI_API_KEY
            default_model = "gpt-4.1"

        self.CLASSIFY_MODEL = os.getenv("CLASSIFY_MODEL", default_model)
        self.CLASSIFY_MAX_TOKENS = self._get_int_env("CLASSIFY_MAX_TOKENS", 2048)
        if self.CLASSIFY_MAX_TOKENS < 1:
            raise ValueError("CLASSIFY_MAX_TOKENS must be >= 1")
        self.REQUEST_TIMEOUT = max(0, self._get_int_env("REQUEST_TIMEOUT", 180))
        self.MOCK_DELAY_SECONDS = max(
            0.0, self._get_float_env("MOCK_DELAY_SECONDS", 1.5)
        )

        # --- HTS Reference Document ---
        self.HTS_DOCUMENT_PATH = Path(
            os.getenv(
                "HTS_DOCUMENT_PATH", str(Path.cwd() / DEFAULT_HTS_DOCUMENT_NAME)
            )
        )
        self.HTS_DOCUMENT_CACHE = (
            os.getenv("HTS_DOCUMENT_CACHE", "false").strip().lower() in _TRUE_VALUES
        )

        # --- HTTP Server ---
        self.SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
        self.SERVER_PORT = self._get_int_env("SERVER_PORT", 8000)

        # --- Logging ---
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "console").lower()
        if self.LOG_FORMAT not in ("console", "json"):
            raise ValueError("LOG_FORMAT must be 'console' or 'json'")

    def _get_int_env(self, var_name: str, default: int) -> int:
        """
        Gets an integer environment variable, raising a readable error if invalid.
        """
        value = os.getenv(var_name)
        if value is None or value.strip() == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(
                f"Environment variable '{var_name}' must be an integer."
            ) from None

    def _get_float_env(self, var_name: str, default: float) -> float:
        value = os.getenv(var_name)
        if value is None or value.strip() == "":
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(
                f"Environment variable '{var_name}' must be a number."
            ) from None


def setup_libraries(settings: Settings) -> None:
    """
    Configures third-party libraries based on the application settings.
    """
    # Retries are owned by the request handler, not the SDK
    openai.max_retries = 0

    if settings.LLM_PROVIDER == "ollama":
        openai.base_url = settings.OLLAMA_BASE_URL
        openai.api_key = settings.LLM_API_KEY
    elif settings.LLM_PROVIDER == "openai" and settings.OPENAI_API_KEY:
        openai.api_key = settings.OPENAI_API_KEY
