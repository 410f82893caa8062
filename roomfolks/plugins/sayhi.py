"""Greeting plugin: answers ``!say`` with ``Hello!``."""

from typing import Any

from roomfolks.events import EVENT_MESSAGE, Event
from roomfolks.plugins.base import Plugin

TRIGGER = "!say"
GREETING = "Hello!"


class SayHiPlugin(Plugin):
    name = "sayhi"

    def __init__(self):
        self.bot = None
        self.log = None

    def init(self, bot, log: Any) -> None:
        self.bot = bot
        self.log = log
        self.log.info("Initializing SayHi plugin")
        bot.route(EVENT_MESSAGE, self.handle_message)

    async def handle_message(self, event: Event) -> None:
        self.log.debug(f"Received message: {event.body!r}")
        if event.is_text_message and event.body == TRIGGER:
            await self.bot.send_text(event.room_id, GREETING)
