"""
Shared LLM helpers.

This module centralizes the OpenAI-compatible chat completion call so every
provider goes through the same entry point (and tests have one place to
patch). The call is made exactly once: retry policy belongs to the caller.
"""

import openai


class OpenAIChatMixin:
    """
    Mixin providing a single OpenAI-compatible chat completion call.

    The mixin expects ``self.settings`` to expose ``REQUEST_TIMEOUT``; a
    value of ``0`` means no per-call timeout.
    """

    def _create_completion(self, **kwargs):
        """Call the OpenAI-compatible chat completion API once."""
        if self.settings.REQUEST_TIMEOUT:
            kwargs.setdefault("timeout", self.settings.REQUEST_TIMEOUT)
        return openai.chat.completions.create(**kwargs)
