"""AI assistant plugin.

Replies to a share of text messages with a completion from the configured
provider. ``response_chance`` is a percentage: 0 never replies, 100 always
replies, anything in between replies to that share of messages at random.
"""

import random
from typing import Any, Optional

from roomfolks.errors import HandlerError, ModerationFlaggedError
from roomfolks.events import EVENT_MESSAGE, Event
from roomfolks.plugins.base import Plugin
from roomfolks.providers.base import CompletionProvider

DEFAULT_CHANCE = 50


class AssistantPlugin(Plugin):
    """Answers room messages through a :class:`CompletionProvider`."""

    name = "assistant"

    def __init__(
        self,
        provider: CompletionProvider,
        response_chance: int = DEFAULT_CHANCE,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            provider: Completion provider used for replies.
            response_chance: Percentage of text messages to answer (0-100).
            rng: Random source, injectable for tests.
        """
        if not 0 <= response_chance <= 100:
            raise ValueError(f"response_chance must be between 0 and 100, got {response_chance}")
        self.provider = provider
        self.response_chance = response_chance
        self.rng = rng or random.Random()
        self.bot = None
        self.log = None

    def init(self, bot, log: Any) -> None:
        self.bot = bot
        self.log = log
        self.log.info(f"Initializing assistant plugin (chance={self.response_chance}%)")
        bot.route(EVENT_MESSAGE, self.handle_message)

    def should_respond(self) -> bool:
        roll = self.rng.randrange(100)
        self.log.debug(f"Response roll: {roll} (chance {self.response_chance})")
        return roll < self.response_chance

    async def handle_message(self, event: Event) -> None:
        if not event.is_text_message or not event.body.strip():
            return
        if not self.should_respond():
            return

        self.log.debug(f"Responding to message in {event.room_id}: {event.body!r}")
        try:
            reply = await self.provider.prompt(event.body)
        except ModerationFlaggedError as e:
            # Flagged input gets no reply
            self.log.warning(f"Not responding to {event.id or 'message'} in {event.room_id}: {e}")
            return
        except Exception as e:
            raise HandlerError(f"failed to generate response: {e}") from e

        try:
            await self.bot.send_text(event.room_id, reply)
        except Exception as e:
            raise HandlerError(f"failed to send message: {e}") from e
