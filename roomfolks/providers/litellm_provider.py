"""LiteLLM completion provider with a moderation pre-check."""

from typing import Any

import litellm
from litellm import acompletion, amoderation
from loguru import logger

from roomfolks.errors import ProviderError
from roomfolks.providers.base import DEFAULT_PROMPT, CompletionProvider, ModerationResult

DEFAULT_MODEL = "openai/gpt-4o-mini"
DEFAULT_MODERATION_MODEL = "omni-moderation-latest"


class LiteLLMProvider(CompletionProvider):
    """
    Completion provider using LiteLLM.

    Every prompt is first sent to the moderation endpoint; only unflagged
    input reaches the chat model. The reply is capped at ``max_tokens``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        model: str = DEFAULT_MODEL,
        moderation_model: str = DEFAULT_MODERATION_MODEL,
        system_prompt: str = DEFAULT_PROMPT,
        max_tokens: int = 100,
    ):
        super().__init__(system_prompt)
        self.api_key = api_key
        self.api_base = api_base
        self.model = model
        self.moderation_model = moderation_model
        self.max_tokens = max_tokens

        # Disable LiteLLM logging noise
        litellm.suppress_debug_info = True
        # Drop unsupported parameters for providers
        litellm.drop_params = True

    def _credentials(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        return kwargs

    async def moderate(self, text: str) -> ModerationResult:
        try:
            response = await amoderation(input=text, model=self.moderation_model, **self._credentials())
        except Exception as e:
            raise ProviderError(f"moderation request failed: {e}") from e
        return self._parse_moderation(response)

    async def complete(self, text: str) -> str:
        """
        Send the system prompt and ``text`` as a chat completion.

        Args:
            text: The user's message.

        Returns:
            The first choice's message content.
        """
        logger.debug(f"Prompting {self.model}: {text[:80]!r}")
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": text},
            ],
            **self._credentials(),
        }
        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            raise ProviderError(f"completion request failed: {e}") from e
        return self._parse_completion(response)

    @staticmethod
    def _parse_moderation(response: Any) -> ModerationResult:
        """Collect flagged categories across all moderation results."""
        result = ModerationResult()
        for item in getattr(response, "results", None) or []:
            if not getattr(item, "flagged", False):
                continue
            result.flagged = True
            categories = getattr(item, "categories", None)
            if categories is None:
                continue
            if hasattr(categories, "model_dump"):
                categories = categories.model_dump()
            if isinstance(categories, dict):
                result.categories.extend(name for name, hit in categories.items() if hit)
        return result

    @staticmethod
    def _parse_completion(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise ProviderError("completion returned no choices")
        content = choices[0].message.content
        if not content:
            raise ProviderError("completion returned empty content")
        return content


__all__ = ["LiteLLMProvider", "DEFAULT_MODEL", "DEFAULT_MODERATION_MODEL"]
