"""Exception hierarchy for roomfolks.

Startup failures (reconciliation, login) and run failures (sync) are
raised to the caller of ``Bot.run``. Per-event failures are raised by the
router and logged by the bot.
"""


class RoomfolksError(Exception):
    """Base class for all roomfolks errors."""


class ConfigError(RoomfolksError):
    """Configuration is missing or invalid."""


class TransportError(RoomfolksError):
    """A transport operation (login, join, leave, send, sync...) failed."""

    def __init__(self, operation: str, message: str, status_code: str | None = None):
        self.operation = operation
        self.status_code = status_code
        detail = f"{operation} failed: {message}"
        if status_code:
            detail = f"{detail} ({status_code})"
        super().__init__(detail)


class ReconcileError(RoomfolksError):
    """Room membership could not be aligned with the desired room set."""

    def __init__(self, message: str, room_id: str | None = None):
        self.room_id = room_id
        super().__init__(message)


class SyncError(RoomfolksError):
    """The sync stream terminated with an error. The cause is chained."""


class BotStateError(RoomfolksError):
    """An operation was attempted in the wrong lifecycle state."""


class HandlerError(RoomfolksError):
    """A route handler failed while processing an event."""


class DuplicatePluginError(RoomfolksError):
    """Two plugins were registered under the same name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"plugin already registered: {name}")


class PluginRegistryFrozenError(RoomfolksError):
    """The plugin registry was modified after it was frozen."""


class ProviderError(RoomfolksError):
    """The completion provider failed to produce a response."""


class ModerationFlaggedError(ProviderError):
    """The moderation check flagged the input; no completion was requested."""

    def __init__(self, categories: list[str] | None = None):
        self.categories = categories or []
        message = "moderation flagged input"
        if self.categories:
            message = f"{message}: {', '.join(self.categories)}"
        super().__init__(message)


__all__ = [
    "RoomfolksError",
    "ConfigError",
    "TransportError",
    "ReconcileError",
    "SyncError",
    "BotStateError",
    "HandlerError",
    "DuplicatePluginError",
    "PluginRegistryFrozenError",
    "ProviderError",
    "ModerationFlaggedError",
]
