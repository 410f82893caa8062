"""Matrix transport built on matrix-nio.

Translates nio room events into :class:`~roomfolks.events.Event` records,
turns nio error responses into :class:`~roomfolks.errors.TransportError`,
and persists the sync cursor and filter ID through a
:class:`~roomfolks.storage.SyncStore`.
"""

from __future__ import annotations

from typing import Any, Optional, Set
from urllib.parse import urlparse

import nio
from loguru import logger

from roomfolks.errors import TransportError
from roomfolks.events import EVENT_MESSAGE, MSGTYPE_TEXT, Event
from roomfolks.storage.sync_store import SyncStore
from roomfolks.transport.base import Transport

DEFAULT_SYNC_TIMEOUT_MS = 30000
ACCOUNT_DATA_LIMIT = 20


def make_user_id(username: str, homeserver: str) -> str:
    """Return a full Matrix ID for ``username``.

    Full IDs (``@name:server``) pass through; a bare localpart gets the
    homeserver's host name as its server name.
    """
    if username.startswith("@") and ":" in username:
        return username
    server = urlparse(homeserver).hostname or homeserver
    return f"@{username.lstrip('@')}:{server}"


def to_event(room: Any, nio_event: Any) -> Event:
    """Convert a nio room event into an :class:`Event`."""
    source = getattr(nio_event, "source", None) or {}
    return Event(
        type=source.get("type") or getattr(nio_event, "type", "") or "",
        sender=getattr(nio_event, "sender", None) or source.get("sender", ""),
        room_id=getattr(room, "room_id", "") or "",
        id=getattr(nio_event, "event_id", None) or source.get("event_id", ""),
        content=dict(source.get("content") or {}),
    )


def _check(response: Any, operation: str) -> Any:
    if isinstance(response, nio.ErrorResponse):
        raise TransportError(operation, response.message or "unknown error", response.status_code)
    return response


class MatrixTransport(Transport):
    """
    Transport over a nio ``AsyncClient``.

    The first sync of a fresh account (no stored cursor) only catches up;
    its timeline is not dispatched so the bot does not answer history.
    """

    def __init__(
        self,
        homeserver: str,
        username: str,
        password: str = "",
        store: Optional[SyncStore] = None,
        device_name: str = "roomfolks",
        sync_timeout_ms: int = DEFAULT_SYNC_TIMEOUT_MS,
        client: Optional[nio.AsyncClient] = None,
    ):
        """
        Args:
            homeserver: Homeserver base URL.
            username: Full Matrix ID or localpart.
            password: Account password used by :meth:`login`.
            store: Sync cursor/filter persistence.
            device_name: Device display name for new logins.
            sync_timeout_ms: Long-poll timeout for each sync request.
            client: Pre-built client, mainly for tests.
        """
        super().__init__()
        self.homeserver = homeserver
        self.password = password
        self.device_name = device_name
        self.sync_timeout_ms = sync_timeout_ms
        self.store = store

        self.client = client or nio.AsyncClient(
            homeserver,
            make_user_id(username, homeserver),
            config=nio.AsyncClientConfig(store_sync_tokens=False, encryption_enabled=False),
        )
        self.client.add_event_callback(self._on_room_event, nio.Event)
        self._catching_up = False

    @property
    def user_id(self) -> str:
        return self.client.user_id

    async def login(self) -> None:
        """Log in with the configured password.

        Raises:
            TransportError: The homeserver rejected the login.
        """
        response = _check(
            await self.client.login(password=self.password, device_name=self.device_name),
            "login",
        )
        logger.info(f"Logged in as {response.user_id} (device {response.device_id})")

    async def _on_room_event(self, room: Any, nio_event: Any) -> None:
        if self._catching_up:
            return
        await self._emit(to_event(room, nio_event))

    def _save_cursor(self, response: Any) -> None:
        if self.store is not None and response.next_batch:
            self.store.save_next_batch(self.user_id, response.next_batch)

    async def _ensure_filter(self) -> Optional[str]:
        """Load the stored sync filter, uploading one on first use."""
        if self.store is None:
            return None
        filter_id = self.store.load_filter_id(self.user_id)
        if filter_id:
            return filter_id
        response = _check(
            await self.client.upload_filter(account_data={"limit": ACCOUNT_DATA_LIMIT}),
            "upload filter",
        )
        self.store.save_filter_id(self.user_id, response.filter_id)
        logger.debug(f"Uploaded sync filter {response.filter_id}")
        return response.filter_id

    async def sync_forever(self) -> None:
        """Catch up if needed, then long-poll until cancelled or failed.

        Raises:
            TransportError: The homeserver answered a sync with an error.
        """
        filter_id = await self._ensure_filter()

        if self.store is not None and not self.client.next_batch:
            self.client.next_batch = self.store.load_next_batch(self.user_id) or None

        if not self.client.next_batch:
            logger.info("No sync cursor stored, catching up without dispatch")
            self._catching_up = True
            try:
                response = await self.client.sync(timeout=0, sync_filter=filter_id, full_state=True)
                _check(response, "initial sync")
                self._save_cursor(response)
            finally:
                self._catching_up = False

        self._running = True
        try:
            while True:
                response = await self.client.sync(timeout=self.sync_timeout_ms, sync_filter=filter_id)
                # Error responses (revoked token, server errors) end the loop
                _check(response, "sync")
                self._save_cursor(response)
        finally:
            self._running = False

    async def joined_rooms(self) -> Set[str]:
        response = _check(await self.client.joined_rooms(), "joined rooms")
        return set(response.rooms)

    async def join_room(self, room_id: str) -> None:
        _check(await self.client.join(room_id), f"join {room_id}")

    async def leave_room(self, room_id: str) -> None:
        _check(await self.client.room_leave(room_id), f"leave {room_id}")

    async def send_text(self, room_id: str, text: str) -> str:
        response = _check(
            await self.client.room_send(
                room_id,
                EVENT_MESSAGE,
                {"msgtype": MSGTYPE_TEXT, "body": text},
            ),
            f"send to {room_id}",
        )
        return response.event_id

    async def mark_read(self, room_id: str, event_id: str) -> None:
        _check(
            await self.client.room_read_markers(room_id, fully_read_event=event_id, read_event=event_id),
            f"mark read in {room_id}",
        )

    async def close(self) -> None:
        await self.client.close()


__all__ = ["MatrixTransport", "make_user_id", "to_event"]
