"""Configuration schema using Pydantic."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from roomfolks.providers.base import DEFAULT_PROMPT
from roomfolks.providers.litellm_provider import DEFAULT_MODEL, DEFAULT_MODERATION_MODEL
from roomfolks.storage.sync_store import MemoryStorage, SqlStorage, StorageBackend


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_assignment=True)


class MatrixConfig(Base):
    """Matrix account and room configuration."""
    homeserver: str = ""  # e.g. https://matrix.example.org
    username: str = ""  # Full MXID or localpart
    password: str = ""
    rooms: list[str] = Field(default_factory=list)  # Room IDs the bot should occupy
    device_name: str = "roomfolks"
    sync_timeout_ms: int = Field(default=30000, ge=0)

    @field_validator("rooms", mode="before")
    @classmethod
    def _split_rooms(cls, value):
        if isinstance(value, str):
            return [room.strip() for room in value.split(",") if room.strip()]
        return value

    @field_validator("rooms")
    @classmethod
    def _require_room_ids(cls, value: list[str]) -> list[str]:
        # Joined rooms are reported by ID, so aliases would never match
        for room in value:
            if not room.startswith("!") or ":" not in room:
                raise ValueError(f"rooms must be room IDs like !abc:example.org, got {room!r}")
        return value


class StorageConfig(Base):
    """Sync state persistence."""
    backend: Literal["memory", "sqlite"] = "sqlite"
    dsn: str = "roomfolks.sqlite3"


class AssistantConfig(Base):
    """AI assistant plugin configuration."""
    enabled: bool = True
    api_key: str = ""
    api_base: Optional[str] = None
    model: str = DEFAULT_MODEL
    moderation_model: str = DEFAULT_MODERATION_MODEL
    prompt: str = DEFAULT_PROMPT  # System prompt
    response_chance: int = Field(default=50, ge=0, le=100)  # Percent of messages answered
    max_tokens: int = Field(default=100, gt=0)


class LoggingConfig(Base):
    """Process logging."""
    level: str = "INFO"
    pretty: bool = False  # Coloured console output instead of JSON lines
    file: Optional[str] = None


class Config(BaseSettings):
    """Root configuration for roomfolks."""
    matrix: MatrixConfig = Field(default_factory=MatrixConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="ROOMFOLKS_",
        env_nested_delimiter="__",
        populate_by_name=True,
    )

    def storage_backend(self) -> StorageBackend:
        """Tagged storage variant for the configured backend."""
        if self.storage.backend == "memory":
            return MemoryStorage()
        return SqlStorage(dsn=self.storage.dsn)

    def missing_matrix_fields(self) -> list[str]:
        """Names of required Matrix settings that are empty."""
        return [
            name for name in ("homeserver", "username", "password")
            if not getattr(self.matrix, name)
        ]
