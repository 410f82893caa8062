"""Bot lifecycle."""

from roomfolks.bot.lifecycle import Bot, BotState

__all__ = ["Bot", "BotState"]
