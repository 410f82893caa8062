"""Tests for room membership reconciliation."""

import pytest

from fakes import FakeTransport, transport_error
from roomfolks.errors import ReconcileError
from roomfolks.rooms.reconciler import RoomReconciler, plan_membership


class TestPlanMembership:
    """Test the set arithmetic."""

    def test_symmetric_difference(self):
        """Leave what is extra, join what is missing."""
        to_leave, to_join = plan_membership({"B", "C"}, {"A", "B"})
        assert to_leave == {"C"}
        assert to_join == {"A"}

    def test_aligned_sets_plan_nothing(self):
        """Equal sets plan no operations."""
        assert plan_membership({"A", "B"}, {"B", "A"}) == (set(), set())


class TestRoomReconciler:
    """Test reconciliation against a transport."""

    @pytest.mark.asyncio
    async def test_scenario_leave_c_join_a(self):
        """Joined {B, C} with desired {A, B} leaves C and joins A."""
        transport = FakeTransport(joined={"B", "C"})
        result = await RoomReconciler(transport).reconcile({"A", "B"})

        assert sorted(transport.calls) == [("join", "A"), ("leave", "C")]
        assert all(room != "B" for _, room in transport.calls)
        assert result.left == ["C"]
        assert result.joined == ["A"]
        assert transport.joined == {"A", "B"}

    @pytest.mark.asyncio
    async def test_idempotent_when_aligned(self):
        """An aligned transport sees no operations."""
        transport = FakeTransport(joined={"A", "B"})
        result = await RoomReconciler(transport).reconcile({"A", "B"})

        assert transport.calls == []
        assert not result.changed

    @pytest.mark.asyncio
    async def test_second_pass_is_noop(self):
        """Reconciling twice does nothing the second time."""
        transport = FakeTransport(joined={"X", "Y"})
        reconciler = RoomReconciler(transport)

        await reconciler.reconcile({"Y", "Z"})
        transport.calls.clear()
        await reconciler.reconcile({"Y", "Z"})

        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_convergence_operations_match_set_differences(self):
        """Operations equal the two set differences."""
        joined = {"r1", "r2", "r3", "r4"}
        desired = {"r3", "r4", "r5", "r6", "r7"}
        transport = FakeTransport(joined=joined)

        await RoomReconciler(transport).reconcile(desired)

        leaves = {room for op, room in transport.calls if op == "leave"}
        joins = {room for op, room in transport.calls if op == "join"}
        assert leaves == joined - desired
        assert joins == desired - joined
        assert len(transport.calls) == len(leaves) + len(joins)

    @pytest.mark.asyncio
    async def test_empty_desired_leaves_everything(self):
        """An empty room list leaves every room."""
        transport = FakeTransport(joined={"A", "B"})
        await RoomReconciler(transport).reconcile(set())
        assert transport.joined == set()

    @pytest.mark.asyncio
    async def test_query_failure_aborts_without_operations(self):
        """A failed room query issues no leave or join."""
        transport = FakeTransport(joined={"A"})
        cause = transport_error("joined rooms")
        transport.failures["joined_rooms"] = cause

        with pytest.raises(ReconcileError) as excinfo:
            await RoomReconciler(transport).reconcile({"B"})

        assert excinfo.value.__cause__ is cause
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_first_join_failure_aborts_remaining(self):
        """The first failed join stops the pass."""
        transport = FakeTransport(joined=set())
        cause = transport_error("join")
        transport.failures[("join", "B")] = cause

        with pytest.raises(ReconcileError) as excinfo:
            await RoomReconciler(transport).reconcile({"A", "B", "C"})

        # Joins are issued in sorted order: A succeeds, B fails, C is untouched
        assert excinfo.value.room_id == "B"
        assert excinfo.value.__cause__ is cause
        assert transport.calls == [("join", "A"), ("join", "B")]
        assert transport.joined == {"A"}

    @pytest.mark.asyncio
    async def test_leave_failure_keeps_prior_progress(self):
        """Rooms already left stay left after a failure."""
        transport = FakeTransport(joined={"L1", "L2"})
        transport.failures[("leave", "L2")] = transport_error("leave")

        with pytest.raises(ReconcileError):
            await RoomReconciler(transport).reconcile({"J1"})

        assert transport.joined == {"L2"}
        assert ("join", "J1") not in transport.calls


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
