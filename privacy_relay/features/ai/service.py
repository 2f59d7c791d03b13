"""Completion passthrough for privacy-policy analysis.

Forwards selected text to the chat completions API and relays the first
choice's text verbatim. No retries; upstream failures surface immediately.
"""

import logging
from typing import Any, Optional

import openai

from privacy_relay.core.errors import CompletionError
from privacy_relay.features.ai.prompts import build_messages

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"


def _first_choice_text(response: Any) -> Optional[str]:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content or None


class PolicyAnalyzer:
    """Summarizes privacy-policy text through an OpenAI-compatible client."""

    def __init__(self, client: Any, model: str = DEFAULT_MODEL):
        self.client = client
        self.model = model

    async def analyze(self, selected_text: str) -> str:
        """Return the model's breakdown of the text.

        Raises:
            CompletionError: Upstream call failed or returned no content
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(selected_text),
            )
        except openai.OpenAIError as e:
            logger.error("[ai] completion request failed", extra={"error_message": str(e)})
            raise CompletionError("Internal server error") from e

        content = _first_choice_text(response)
        if content is None:
            logger.error("[ai] completion response had no content", extra={"model": self.model})
            raise CompletionError("OpenAI response failed.")
        return content

    async def aclose(self) -> None:
        await self.client.close()


def create_analyzer(api_key: str, model: str = DEFAULT_MODEL) -> PolicyAnalyzer:
    return PolicyAnalyzer(openai.AsyncOpenAI(api_key=api_key), model=model)
