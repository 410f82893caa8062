"""AI completion providers."""

from roomfolks.providers.base import DEFAULT_PROMPT, CompletionProvider, ModerationResult
from roomfolks.providers.litellm_provider import LiteLLMProvider

__all__ = ["CompletionProvider", "ModerationResult", "LiteLLMProvider", "DEFAULT_PROMPT"]
