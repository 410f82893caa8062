"""Room membership reconciliation.

Aligns the rooms the bot is actually joined to with the configured room
set. Reconciliation is declarative: running it against a transport that
is already aligned performs no operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List

from loguru import logger

from roomfolks.errors import ReconcileError
from roomfolks.transport.base import Transport


@dataclass
class ReconcileResult:
    """Rooms touched by one reconciliation pass."""
    left: List[str] = field(default_factory=list)
    joined: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.left or self.joined)


def plan_membership(joined: AbstractSet[str], desired: AbstractSet[str]) -> tuple[set[str], set[str]]:
    """Compute ``(to_leave, to_join)`` for a joined snapshot and a desired set."""
    return set(joined) - set(desired), set(desired) - set(joined)


class RoomReconciler:
    """Issues leave/join operations until joined rooms match the desired set."""

    def __init__(self, transport: Transport):
        self.transport = transport

    async def reconcile(self, desired: Iterable[str]) -> ReconcileResult:
        """Align membership with ``desired``.

        The first failing query, leave or join aborts the pass. Rooms
        already left or joined stay that way; remaining rooms are untouched.

        Raises:
            ReconcileError: chained to the transport failure.
        """
        desired_set = frozenset(desired)
        result = ReconcileResult()

        try:
            joined = await self.transport.joined_rooms()
        except Exception as e:
            raise ReconcileError(f"failed to query joined rooms: {e}") from e

        to_leave, to_join = plan_membership(joined, desired_set)
        logger.info(
            f"Reconciling rooms: {len(joined)} joined, {len(desired_set)} desired, "
            f"{len(to_leave)} to leave, {len(to_join)} to join"
        )

        for room_id in sorted(to_leave):
            try:
                await self.transport.leave_room(room_id)
            except Exception as e:
                raise ReconcileError(f"failed to leave room {room_id}: {e}", room_id=room_id) from e
            result.left.append(room_id)
            logger.info(f"Left room {room_id}")

        for room_id in sorted(to_join):
            try:
                await self.transport.join_room(room_id)
            except Exception as e:
                raise ReconcileError(f"failed to join room {room_id}: {e}", room_id=room_id) from e
            result.joined.append(room_id)
            logger.info(f"Joined room {room_id}")

        if not result.changed:
            logger.debug("Room membership already aligned")
        return result


__all__ = ["ReconcileResult", "RoomReconciler", "plan_membership"]
