"""Plugin registry.

Plugins are collected into a registry before the bot is built. Names are
unique: registering a second plugin under an existing name raises
:class:`~roomfolks.errors.DuplicatePluginError`. Once frozen, the registry
cannot change.
"""

from typing import Dict, Iterable, Iterator, List

from loguru import logger

from roomfolks.errors import DuplicatePluginError, PluginRegistryFrozenError
from roomfolks.plugins.base import Plugin


class PluginRegistry:
    """Ordered, name-unique collection of plugins.

    Example:
        registry = PluginRegistry.build([SayHiPlugin(), AssistantPlugin(...)])
        bot = Bot(transport, rooms=rooms, plugins=registry)
    """

    def __init__(self):
        self._plugins: Dict[str, Plugin] = {}
        self._frozen = False

    @classmethod
    def build(cls, plugins: Iterable[Plugin]) -> "PluginRegistry":
        """Register ``plugins`` in order and freeze the result.

        Raises:
            DuplicatePluginError: If two plugins share a name
        """
        registry = cls()
        for plugin in plugins:
            registry.register(plugin)
        registry.freeze()
        return registry

    def register(self, plugin: Plugin) -> None:
        """Add a plugin.

        Args:
            plugin: Plugin instance

        Raises:
            DuplicatePluginError: If the name is already registered
            PluginRegistryFrozenError: If the registry is frozen
        """
        if self._frozen:
            raise PluginRegistryFrozenError(
                f"cannot register plugin '{plugin.name}': registry is frozen"
            )

        name = plugin.name
        if name in self._plugins:
            raise DuplicatePluginError(name)

        self._plugins[name] = plugin
        logger.debug(f"Registered plugin: {name}")

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> List[str]:
        """Plugin names in registration order."""
        return list(self._plugins.keys())

    def __iter__(self) -> Iterator[Plugin]:
        return iter(list(self._plugins.values()))

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, name: str) -> bool:
        return name in self._plugins


__all__ = ["PluginRegistry"]
