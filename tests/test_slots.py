from datetime import date, datetime, time

import pytest

from clubexpress_courts import slots
from clubexpress_courts.errors import InvalidSlotRange


@pytest.fixture
def origin():
    return datetime(2024, 6, 10, 8, 0)


def test_slot_to_time_first_slot_is_origin(origin):
    assert slots.slot_to_time(100, origin, 100) == origin


def test_slot_to_time_is_linear(origin):
    assert slots.slot_to_time(106, origin, 100) == datetime(2024, 6, 10, 9, 30)
    assert slots.slot_to_time(141, origin, 100) == datetime(2024, 6, 10, 18, 15)


def test_slot_to_time_anchored_to_the_days_first_slot(origin):
    # Same slot index, different day origin index
    assert slots.slot_to_time(500, origin, 500) == datetime(2024, 6, 10, 8, 0)
    assert slots.slot_to_time(500, origin, 494) == datetime(2024, 6, 10, 9, 30)


def test_slot_to_time_rejects_slot_before_origin(origin):
    with pytest.raises(InvalidSlotRange) as exc:
        slots.slot_to_time(99, origin, 100)
    assert exc.value.code == "COURTS_INVALID_SLOT_RANGE"


def test_slot_to_time_rejects_non_positive_width(origin):
    with pytest.raises(InvalidSlotRange):
        slots.slot_to_time(101, origin, 100, slot_minutes=0)


def test_time_to_slot_inverts_slot_to_time(origin):
    assert slots.time_to_slot(datetime(2024, 6, 10, 9, 30), origin, 100) == 106
    assert slots.time_to_slot(origin, origin, 100) == 100


def test_time_to_slot_rejects_misaligned_time(origin):
    with pytest.raises(InvalidSlotRange):
        slots.time_to_slot(datetime(2024, 6, 10, 8, 7), origin, 100)


def test_time_to_slot_rejects_time_before_origin(origin):
    with pytest.raises(InvalidSlotRange):
        slots.time_to_slot(datetime(2024, 6, 10, 7, 45), origin, 100)


def test_block_start_indices():
    starts = slots.block_start_indices(100, 6, 7)
    assert list(starts) == [100, 106, 112, 118, 124, 130, 136]
    # Restartable
    assert list(starts) == list(starts)


def test_block_start_indices_rejects_bad_size():
    with pytest.raises(InvalidSlotRange):
        slots.block_start_indices(100, 0, 7)


def test_block_size_in_slots():
    assert slots.block_size_in_slots(90) == 6
    assert slots.block_size_in_slots(60, 30) == 2
    with pytest.raises(InvalidSlotRange):
        slots.block_size_in_slots(100)


def test_block_start_times():
    starts = slots.block_start_times(time(8, 0), 90, 9)
    assert starts == [
        time(8, 0),
        time(9, 30),
        time(11, 0),
        time(12, 30),
        time(14, 0),
        time(15, 30),
        time(17, 0),
        time(18, 30),
        time(20, 0),
    ]


def test_day_offset_counts_calendar_days():
    assert slots.day_offset(date(2024, 6, 10), date(2024, 6, 10)) == 0
    assert slots.day_offset(date(2024, 6, 17), date(2024, 6, 10)) == 7
    assert slots.day_offset(date(2024, 6, 9), date(2024, 6, 10)) == -1


def test_day_offset_ignores_time_of_day():
    # 23:59 today to 00:01 tomorrow is still one day
    assert slots.day_offset(datetime(2024, 6, 11, 0, 1), datetime(2024, 6, 10, 23, 59)) == 1
    # Across a DST change
    assert slots.day_offset(date(2024, 3, 11), date(2024, 3, 9)) == 2
