"""Base completion provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from roomfolks.errors import ModerationFlaggedError

DEFAULT_PROMPT = (
    "This is a conversation with an AI assistant. The assistant is helpful, "
    "creative, clever, and very friendly. You are in a Matrix channel. "
    "The audience for this conversation is mostly technical."
)


@dataclass
class ModerationResult:
    """Outcome of a moderation check."""
    flagged: bool = False
    categories: List[str] = field(default_factory=list)


class CompletionProvider(ABC):
    """
    Abstract base class for AI completion providers.

    ``prompt`` runs a moderation check before asking for a completion and
    raises :class:`~roomfolks.errors.ModerationFlaggedError` when the input
    is flagged, so callers can stay silent instead of replying.
    """

    def __init__(self, system_prompt: str = DEFAULT_PROMPT):
        self.system_prompt = system_prompt

    @abstractmethod
    async def moderate(self, text: str) -> ModerationResult:
        """Run the moderation check on ``text``."""
        pass

    @abstractmethod
    async def complete(self, text: str) -> str:
        """Request a completion for ``text`` under the system prompt."""
        pass

    async def prompt(self, text: str) -> str:
        """
        Moderate, then complete.

        Args:
            text: User message.

        Returns:
            Completion text.

        Raises:
            ModerationFlaggedError: The input was flagged.
            ProviderError: Moderation or completion failed.
        """
        result = await self.moderate(text)
        if result.flagged:
            raise ModerationFlaggedError(result.categories)
        return await self.complete(text)
