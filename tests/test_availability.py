"""Tests for the reschedule availability check against the in-memory store."""

import pytest

from salon_booking.exceptions import PersistenceError, ValidationError
from salon_booking.logging_context import get_check_id, set_check_id
from salon_booking.scheduling.availability import (
    BLOCK_CONFLICT_MESSAGE,
    BOOKING_CONFLICT_MESSAGE,
    check_reschedule_availability,
    collect_exclude_ids,
)
from salon_booking.schemas.booking_schema import ConflictKind
from tests.conftest import OTHER_STYLIST, STYLIST, make_row, utc


class _RecordingStore:
    """Store double that records calls and returns nothing."""

    def __init__(self):
        self.calls = []

    async def find_overlapping(self, resource_id, slots, exclude_ids):
        self.calls.append(("bookings", resource_id, list(slots), list(exclude_ids)))
        return []

    async def find_overlapping_blocks(self, resource_id, slots):
        self.calls.append(("blocks", resource_id, list(slots)))
        return []


class _FailingStore:
    async def find_overlapping(self, resource_id, slots, exclude_ids):
        raise PersistenceError("connection refused")

    async def find_overlapping_blocks(self, resource_id, slots):
        raise PersistenceError("connection refused")


class TestBookingConflicts:
    @pytest.mark.asyncio
    async def test_touching_booking_is_not_a_conflict(self, store):
        store.add_booking("B9", STYLIST, utc(9), utc(9, 30))
        result = await check_reschedule_availability(
            store, STYLIST, utc(9, 30), [make_row(30)]
        )
        assert result.ok is True
        assert result.conflict is None
        assert result.slots[0].start == utc(9, 30)

    @pytest.mark.asyncio
    async def test_booking_starting_at_slot_end_is_not_a_conflict(self, store):
        store.add_booking("B9", STYLIST, utc(10), utc(10, 30))
        result = await check_reschedule_availability(store, STYLIST, utc(9, 30), [make_row(30)])
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_partial_overlap_is_a_conflict(self, store):
        store.add_booking("B2", STYLIST, utc(9, 15), utc(9, 45))
        result = await check_reschedule_availability(store, STYLIST, utc(9), [make_row(30)])
        assert result.ok is False
        assert result.message == BOOKING_CONFLICT_MESSAGE
        assert result.conflict_kind == ConflictKind.BOOKING
        assert result.conflict.id == "B2"
        assert result.conflict.resource_id == STYLIST
        assert result.conflict.start == utc(9, 15)
        assert result.conflict.end == utc(9, 45)

    @pytest.mark.asyncio
    async def test_booking_inside_a_slot_is_a_conflict(self, store):
        store.add_booking("B3", STYLIST, utc(9, 10), utc(9, 20))
        result = await check_reschedule_availability(store, STYLIST, utc(9), [make_row(60)])
        assert result.ok is False

    @pytest.mark.asyncio
    async def test_any_slot_can_conflict(self, store):
        store.add_booking("B4", STYLIST, utc(10, 20), utc(10, 25))
        rows = [make_row(45, "Tint"), make_row(20, "Blow Dry")]
        result = await check_reschedule_availability(
            store, STYLIST, utc(9), rows, chemical_gap_minutes=30
        )
        assert result.ok is False
        assert result.conflict.id == "B4"

    @pytest.mark.asyncio
    async def test_booking_inside_chemical_gap_is_allowed(self, store):
        store.add_booking("B5", STYLIST, utc(9, 50), utc(10, 10))
        rows = [make_row(45, "Tint"), make_row(20, "Blow Dry")]
        result = await check_reschedule_availability(
            store, STYLIST, utc(9), rows, chemical_gap_minutes=30
        )
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_other_stylists_bookings_are_ignored(self, store):
        store.add_booking("B6", OTHER_STYLIST, utc(9), utc(10))
        result = await check_reschedule_availability(store, STYLIST, utc(9), [make_row(30)])
        assert result.ok is True


class TestSelfExclusion:
    @pytest.mark.asyncio
    async def test_explicit_exclusion(self, store):
        store.add_booking("B1", STYLIST, utc(9), utc(9, 30))
        result = await check_reschedule_availability(
            store, STYLIST, utc(9), [make_row(30)], exclude_booking_ids=["B1"]
        )
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_row_ids_are_excluded(self, store):
        store.add_booking("B1", STYLIST, utc(9), utc(9, 30))
        store.add_booking("B2", STYLIST, utc(9, 30), utc(10))
        rows = [make_row(30, row_id="B1"), make_row(30, row_id="B2")]
        result = await check_reschedule_availability(store, STYLIST, utc(9, 15), rows)
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_exclusion_does_not_hide_others(self, store):
        store.add_booking("B1", STYLIST, utc(9), utc(9, 30))
        store.add_booking("B7", STYLIST, utc(9, 10), utc(9, 20))
        result = await check_reschedule_availability(
            store, STYLIST, utc(9), [make_row(30, row_id="B1")]
        )
        assert result.ok is False
        assert result.conflict.id == "B7"

    def test_collect_exclude_ids_dedupes_and_drops_blanks(self):
        rows = [make_row(row_id="B1"), make_row(row_id=None), {"id": "B2"}]
        assert collect_exclude_ids(rows, ["B2", "", None, "B3"]) == ["B1", "B2", "B3"]


class TestScheduleBlocks:
    @pytest.mark.asyncio
    async def test_blocks_ignored_unless_requested(self, store):
        store.add_block("K1", utc(9), utc(10), staff_id=STYLIST)
        result = await check_reschedule_availability(
            store, STYLIST, utc(9), [make_row(30)], include_schedule_blocks=False
        )
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_staff_block_conflicts(self, store):
        store.add_block("K1", utc(9), utc(10), staff_id=STYLIST, is_locked=True)
        result = await check_reschedule_availability(
            store, STYLIST, utc(9, 30), [make_row(30)], include_schedule_blocks=True
        )
        assert result.ok is False
        assert result.message == BLOCK_CONFLICT_MESSAGE
        assert result.conflict_kind == ConflictKind.SCHEDULE_BLOCK
        assert result.conflict.id == "K1"
        assert result.conflict.is_locked is True

    @pytest.mark.asyncio
    async def test_global_block_conflicts(self, store):
        store.add_block("K2", utc(12), utc(13))
        result = await check_reschedule_availability(
            store, STYLIST, utc(12, 30), [make_row(30)], include_schedule_blocks=True
        )
        assert result.ok is False
        assert result.conflict.staff_id is None

    @pytest.mark.asyncio
    async def test_inactive_and_other_staff_blocks_ignored(self, store):
        store.add_block("K3", utc(9), utc(10), staff_id=STYLIST, is_active=False)
        store.add_block("K4", utc(9), utc(10), staff_id=OTHER_STYLIST)
        result = await check_reschedule_availability(
            store, STYLIST, utc(9), [make_row(30)], include_schedule_blocks=True
        )
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_booking_conflict_reported_before_block(self, store):
        store.add_booking("B1", STYLIST, utc(9), utc(9, 30))
        store.add_block("K1", utc(9), utc(9, 30))
        result = await check_reschedule_availability(
            store, STYLIST, utc(9), [make_row(30)], include_schedule_blocks=True
        )
        assert result.conflict_kind == ConflictKind.BOOKING


class TestValidationAndFailures:
    @pytest.mark.asyncio
    async def test_empty_rows_rejected_before_any_read(self):
        recording = _RecordingStore()
        with pytest.raises(ValidationError, match="No booking rows"):
            await check_reschedule_availability(recording, STYLIST, utc(9), [])
        assert recording.calls == []

    @pytest.mark.asyncio
    async def test_missing_store_rejected(self):
        with pytest.raises(ValidationError, match="store"):
            await check_reschedule_availability(None, STYLIST, utc(9), [make_row(30)])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resource_id", [None, "", "   "])
    async def test_missing_stylist_rejected(self, resource_id):
        recording = _RecordingStore()
        with pytest.raises(ValidationError, match="stylist"):
            await check_reschedule_availability(recording, resource_id, utc(9), [make_row(30)])
        assert recording.calls == []

    @pytest.mark.asyncio
    async def test_invalid_start_rejected(self):
        recording = _RecordingStore()
        with pytest.raises(ValidationError):
            await check_reschedule_availability(recording, STYLIST, "soon", [make_row(30)])
        assert recording.calls == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self):
        with pytest.raises(PersistenceError, match="connection refused"):
            await check_reschedule_availability(_FailingStore(), STYLIST, utc(9), [make_row(30)])

    @pytest.mark.asyncio
    async def test_block_read_failure_propagates(self):
        class _BlocksDown(_RecordingStore):
            async def find_overlapping_blocks(self, resource_id, slots):
                raise PersistenceError("blocks table unavailable")

        with pytest.raises(PersistenceError):
            await check_reschedule_availability(
                _BlocksDown(), STYLIST, utc(9), [make_row(30)], include_schedule_blocks=True
            )

    @pytest.mark.asyncio
    async def test_single_read_with_all_slots(self):
        recording = _RecordingStore()
        rows = [make_row(30, row_id="B1"), make_row(30, "Tint", row_id="B2"), make_row(15)]
        await check_reschedule_availability(
            recording, STYLIST, utc(9), rows, exclude_booking_ids=["B9"],
            include_schedule_blocks=False,
        )
        assert len(recording.calls) == 1
        kind, resource_id, slots, exclude_ids = recording.calls[0]
        assert kind == "bookings"
        assert resource_id == STYLIST
        assert len(slots) == 3
        assert exclude_ids == ["B1", "B2", "B9"]


class TestCorrelation:
    @pytest.mark.asyncio
    async def test_each_check_gets_its_own_id(self):
        seen = []

        class _IdRecordingStore(_RecordingStore):
            async def find_overlapping(self, resource_id, slots, exclude_ids):
                seen.append(get_check_id())
                return []

        recording = _IdRecordingStore()
        set_check_id("CHK-caller")
        await check_reschedule_availability(recording, STYLIST, utc(9), [make_row(30)])
        await check_reschedule_availability(recording, STYLIST, utc(10), [make_row(30)])

        assert len(seen) == 2
        assert seen[0] != seen[1]
        assert "CHK-caller" not in seen
        assert get_check_id() == "CHK-caller"
