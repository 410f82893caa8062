"""Base plugin interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from roomfolks.bot.lifecycle import Bot


class Plugin(ABC):
    """
    Abstract base class for bot features.

    A plugin attaches its routes to the bot from :meth:`init`, which runs
    once while the bot is being constructed. The bot does not keep the
    plugin afterwards, so any state the handlers need must be reachable
    from the handlers themselves (usually bound methods of the plugin).
    """

    name: str = "base"

    @abstractmethod
    def init(self, bot: "Bot", log: Any) -> None:
        """
        Register routes on the bot.

        Must not block: the event loop cannot start until every plugin
        has been initialized.

        Args:
            bot: The bot being constructed.
            log: Logger bound to this plugin's name.
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
