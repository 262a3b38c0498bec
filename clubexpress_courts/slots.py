import logging
from datetime import date, datetime, time, timedelta
from typing import List

from clubexpress_courts.errors import InvalidSlotRange

logger = logging.getLogger(__name__)

SLOT_MINUTES = 15


def slot_to_time(slot_index: int, day_origin: datetime, first_slot_index: int, slot_minutes: int = SLOT_MINUTES) -> datetime:
    """Maps a grid slot index onto the wall-clock time at which that slot starts.

    The grid numbers its slots with a per-day offset, so `first_slot_index` must be
    the value the grid reported for the same day as `day_origin`.
    """
    if slot_minutes <= 0:
        raise InvalidSlotRange(f"Slot width must be positive, got {slot_minutes} minutes.")
    if slot_index < first_slot_index:
        raise InvalidSlotRange(
            f"Slot {slot_index} lies before the first slot of the day ({first_slot_index}).",
            {"slot_index": slot_index, "first_slot_index": first_slot_index},
        )
    return day_origin + timedelta(minutes=(slot_index - first_slot_index) * slot_minutes)


def time_to_slot(moment: datetime, day_origin: datetime, first_slot_index: int, slot_minutes: int = SLOT_MINUTES) -> int:
    """Inverse of slot_to_time: the index of the slot starting exactly at `moment`."""
    if slot_minutes <= 0:
        raise InvalidSlotRange(f"Slot width must be positive, got {slot_minutes} minutes.")
    elapsed = moment - day_origin
    if elapsed < timedelta(0):
        raise InvalidSlotRange(f"{moment.isoformat()} is before the first slot at {day_origin.isoformat()}.")
    offset, remainder = divmod(elapsed, timedelta(minutes=slot_minutes))
    if remainder:
        raise InvalidSlotRange(f"{moment.isoformat()} is not on a {slot_minutes}-minute slot boundary.")
    return first_slot_index + offset


def block_size_in_slots(block_minutes: int, slot_minutes: int = SLOT_MINUTES) -> int:
    if slot_minutes <= 0 or block_minutes <= 0 or block_minutes % slot_minutes:
        raise InvalidSlotRange(
            f"A {block_minutes}-minute block cannot be built from {slot_minutes}-minute slots."
        )
    return block_minutes // slot_minutes


def block_start_indices(first_slot_index: int, block_size: int, blocks_per_day: int) -> range:
    """Slot indices at which each calendar booking block of the day starts."""
    if block_size <= 0:
        raise InvalidSlotRange(f"Block size must be positive, got {block_size} slots.")
    if blocks_per_day < 0:
        raise InvalidSlotRange(f"Number of blocks per day cannot be negative, got {blocks_per_day}.")
    return range(first_slot_index, first_slot_index + block_size * blocks_per_day, block_size)


def block_start_times(day_start: time, block_minutes: int, blocks_per_day: int, slot_minutes: int = SLOT_MINUTES) -> List[time]:
    """Wall-clock start times of the calendar booking blocks, e.g. 08:00, 09:30, 11:00 ..."""
    size = block_size_in_slots(block_minutes, slot_minutes)
    origin = datetime.combine(date.min, day_start)
    starts = [
        slot_to_time(index, origin, 0, slot_minutes).time()
        for index in block_start_indices(0, size, blocks_per_day)
    ]
    logger.debug(f"Generated {len(starts)} block start times: {[t.strftime('%H:%M') for t in starts]}")
    return starts


def day_offset(target: date, today: date) -> int:
    """Whole calendar days between today and the target date, as the grid endpoint expects."""
    if isinstance(target, datetime):
        target = target.date()
    if isinstance(today, datetime):
        today = today.date()
    return (target - today).days
