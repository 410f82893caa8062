"""Tests for configuration loading, saving and redaction."""

import json

import pytest

from roomfolks.config.loader import MASK, load_config, redact, save_config
from roomfolks.config.schema import Config
from roomfolks.errors import ConfigError
from roomfolks.storage.sync_store import MemoryStorage, SqlStorage


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ROOMFOLKS_MATRIX__HOMESERVER",
        "ROOMFOLKS_MATRIX__USERNAME",
        "ROOMFOLKS_MATRIX__PASSWORD",
        "ROOMFOLKS_ASSISTANT__ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return path


class TestSchema:
    """Test defaults and validation."""

    def test_defaults(self):
        """Defaults need only Matrix credentials."""
        config = Config()
        assert config.storage.backend == "sqlite"
        assert config.assistant.response_chance == 50
        assert config.matrix.rooms == []
        assert config.missing_matrix_fields() == ["homeserver", "username", "password"]

    def test_rooms_accept_comma_string(self):
        """A comma-separated string becomes a room list."""
        config = Config(matrix={"rooms": "!a:x, !b:x,,"})
        assert config.matrix.rooms == ["!a:x", "!b:x"]

    def test_room_aliases_rejected(self):
        """Rooms must be room IDs; aliases never match joined rooms."""
        with pytest.raises(ValueError, match="room IDs"):
            Config(matrix={"rooms": ["#general:example.org"]})
        with pytest.raises(ValueError):
            Config(matrix={"rooms": "!ok:example.org,general"})

    def test_room_assignment_is_validated(self):
        """Overriding rooms after load goes through the same check."""
        config = Config()
        with pytest.raises(ValueError):
            config.matrix.rooms = ["#general:example.org"]
        config.matrix.rooms = ["!abc:example.org"]
        assert config.matrix.rooms == ["!abc:example.org"]

    def test_chance_bounds(self):
        """response_chance is limited to 0-100."""
        with pytest.raises(ValueError):
            Config(assistant={"responseChance": 150})

    def test_storage_backend_variants(self):
        """The storage section maps onto a tagged backend."""
        assert Config(storage={"backend": "memory"}).storage_backend() == MemoryStorage()
        assert Config(storage={"dsn": "/tmp/x.db"}).storage_backend() == SqlStorage(dsn="/tmp/x.db")

    def test_env_overrides(self, monkeypatch):
        """ROOMFOLKS_ variables override defaults."""
        monkeypatch.setenv("ROOMFOLKS_MATRIX__HOMESERVER", "https://env.example.org")
        assert Config().matrix.homeserver == "https://env.example.org"


class TestLoader:
    """Test file loading and saving."""

    def test_camel_case_file(self, tmp_path):
        """camelCase keys in the file are accepted."""
        path = write_config(tmp_path, {
            "matrix": {"homeserver": "https://m.example.org", "username": "bot", "syncTimeoutMs": 1000},
            "assistant": {"apiKey": "sk-test", "responseChance": 10},
        })
        config = load_config(path)
        assert config.matrix.sync_timeout_ms == 1000
        assert config.assistant.api_key == "sk-test"
        assert config.assistant.response_chance == 10

    def test_explicit_missing_path_raises(self, tmp_path):
        """An explicit path that does not exist is an error."""
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.json")

    def test_invalid_json_raises(self, tmp_path):
        """Malformed JSON is reported as ConfigError."""
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="invalid JSON"):
            load_config(path)

    def test_invalid_values_raise(self, tmp_path):
        """Schema violations are reported as ConfigError."""
        path = write_config(tmp_path, {"storage": {"backend": "postgres"}})
        with pytest.raises(ConfigError, match="invalid configuration"):
            load_config(path)

    def test_save_round_trip_is_private(self, tmp_path):
        """Saved config reloads and is readable by the owner only."""
        path = tmp_path / "sub" / "config.json"
        save_config(Config(matrix={"username": "bot"}), path)

        assert load_config(path).matrix.username == "bot"
        assert path.stat().st_mode & 0o777 == 0o600

    def test_redact_masks_secrets(self):
        """Passwords and API keys are masked."""
        data = redact(Config(matrix={"password": "hunter2"}, assistant={"apiKey": "sk"}).model_dump(by_alias=True))
        assert data["matrix"]["password"] == MASK
        assert data["assistant"]["apiKey"] == MASK
        assert data["matrix"]["homeserver"] == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
