import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from clubexpress_courts import slots
from clubexpress_courts.classify import classify_court
from clubexpress_courts.errors import AvailabilityResolutionError, InvalidSlotRange
from clubexpress_courts.models import (
    AvailabilityOptions,
    BookingPolicy,
    Court,
    CourtAvailability,
    CourtFilterOptions,
    Grid,
    GridResolution,
    GridResource,
    ResourceError,
    TimeSlot,
)

logger = logging.getLogger(__name__)

SlotRun = Tuple[int, int]  # first and last slot index, inclusive


def free_slots(resource: GridResource) -> List[int]:
    """Slot indices within the resource's open range that no reservation covers, ascending."""
    first = resource.first_available_slot
    last = resource.last_available_slot
    if first > last:
        raise InvalidSlotRange(
            f"Court {resource.name} opens at slot {first} but closes at slot {last}.",
            {"resource_id": resource.id, "first": first, "last": last},
        )

    open_slots = set(range(first, last + 1))
    logger.debug(f"Court {resource.name} has {len(open_slots)} total time slots")

    for reservation in resource.reservations:
        logger.debug(
            f"Found reservation: {reservation.usage_label} by {reservation.occupant_label} "
            f"({reservation.first_slot}-{reservation.last_slot})"
        )
        # Ranges reaching outside the open hours or overlapping each other are fine
        open_slots.difference_update(range(reservation.first_slot, reservation.last_slot + 1))

    logger.debug(f"Court {resource.name} has {len(open_slots)} free time slots after removing reservations")
    return sorted(open_slots)


def find_blocks(free: List[int], block_starts: Iterable[int], block_size: int) -> List[SlotRun]:
    """Picks the calendar blocks whose every slot is free.

    `block_starts` is the day's block template, so blocks never overlap and never
    start off the calendar. A free run longer than one block yields one block per
    template start it covers; partial blocks are dropped.
    """
    if block_size <= 0:
        raise InvalidSlotRange(f"Block size must be positive, got {block_size} slots.")

    free_set = set(free)
    return [
        (start, start + block_size - 1)
        for start in block_starts
        if all(slot in free_set for slot in range(start, start + block_size))
    ]


def bookable_starts(first_time_slot_index: int, policy: BookingPolicy) -> List[int]:
    """Template block starts that are also valid booking start times under the policy."""
    origin = datetime.combine(date.min, policy.day_start)
    valid = {(t.hour, t.minute) for t in policy.start_times()}
    starts = []
    for index in slots.block_start_indices(first_time_slot_index, policy.block_size, policy.blocks_per_day):
        moment = slots.slot_to_time(index, origin, first_time_slot_index, policy.slot_duration_minutes)
        if (moment.hour, moment.minute) in valid:
            starts.append(index)
    return starts


def _wall_clock(moment: datetime) -> datetime:
    return moment.replace(tzinfo=None) if moment.tzinfo else moment


def filter_blocks(
    blocks: List[TimeSlot],
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    min_duration_minutes: Optional[int] = None,
) -> List[TimeSlot]:
    """Keeps the blocks passing every filter that is set. Times are compared as wall-clock times."""
    filtered = list(blocks)
    if start_time is not None:
        earliest = _wall_clock(start_time)
        filtered = [b for b in filtered if b.start_time >= earliest]
    if end_time is not None:
        latest = _wall_clock(end_time)
        filtered = [b for b in filtered if b.end_time <= latest]
    if min_duration_minutes is not None:
        filtered = [b for b in filtered if b.duration_minutes >= min_duration_minutes]
    return filtered


def court_matches(court: Court, options: CourtFilterOptions) -> bool:
    """Case-insensitive substring match on type and location; every requested feature must match some feature."""
    if options.type and not (court.type and options.type.lower() in court.type.lower()):
        return False
    if options.features:
        court_features = [f.lower() for f in court.features]
        for wanted in options.features:
            if not any(wanted.lower() in f for f in court_features):
                return False
    if options.location and not (court.location and options.location.lower() in court.location.lower()):
        return False
    return True


def filter_courts(results: List[CourtAvailability], options: CourtFilterOptions) -> List[CourtAvailability]:
    return [r for r in results if court_matches(r.court, options)]


def parse_resource(raw: Dict[str, Any]) -> GridResource:
    try:
        return GridResource.model_validate(raw)
    except ValidationError as e:
        resource_id = raw.get("id") if isinstance(raw, dict) else None
        raise AvailabilityResolutionError(
            f"Malformed grid data for resource {resource_id}: {e.error_count()} invalid field(s)",
            {"resource_id": resource_id, "errors": e.errors(include_url=False)},
        ) from e


def resolve_resource(
    resource: GridResource,
    day: date,
    first_time_slot_index: int,
    options: AvailabilityOptions,
    policy: BookingPolicy,
) -> Optional[CourtAvailability]:
    """Computes the bookable blocks of one court, or None when no block survives the filters."""
    court = classify_court(resource.id, resource.name)
    free = free_slots(resource)

    block_size = policy.block_size
    slot_minutes = policy.slot_duration_minutes
    origin = datetime.combine(day, policy.day_start)

    blocks = [
        TimeSlot(
            start_time=slots.slot_to_time(start, origin, first_time_slot_index, slot_minutes),
            end_time=slots.slot_to_time(end, origin, first_time_slot_index, slot_minutes)
            + timedelta(minutes=slot_minutes),
            duration_minutes=block_size * slot_minutes,
        )
        for start, end in find_blocks(free, bookable_starts(first_time_slot_index, policy), block_size)
    ]
    logger.debug(f"Court {court.name} has {len(blocks)} available booking slots after grouping")

    filtered = filter_blocks(blocks, options.start_time, options.end_time, options.min_duration_minutes)
    logger.debug(f"Court {court.name} has {len(filtered)} available booking slots after time filtering")

    if not filtered:
        return None
    return CourtAvailability(court=court, date=day, available_slots=filtered)


def parse_grid(raw_grid: Dict[str, Any]) -> Grid:
    try:
        return Grid.model_validate(raw_grid)
    except ValidationError as e:
        raise AvailabilityResolutionError(
            f"Malformed schedule grid: {e.error_count()} invalid field(s)",
            {"errors": e.errors(include_url=False)},
        ) from e


def resolve_grid(
    raw_grid: Dict[str, Any],
    options: AvailabilityOptions,
    policy: Optional[BookingPolicy] = None,
) -> GridResolution:
    """Turns a raw schedule grid into the available blocks of every court.

    A court with malformed data is reported in `errors` and skipped; the other courts
    still resolve. Courts without any block left after filtering are left out.
    """
    policy = policy or BookingPolicy()
    grid = parse_grid(raw_grid)
    logger.info(f"Resolving grid for {options.date} (display date: {grid.display_date}, first slot: {grid.first_time_slot_index})")

    results: List[CourtAvailability] = []
    errors: List[ResourceError] = []

    for raw in grid.resources:
        try:
            resource = parse_resource(raw)
            availability = resolve_resource(resource, options.date, grid.first_time_slot_index, options, policy)
        except (AvailabilityResolutionError, InvalidSlotRange) as e:
            resource_id = e.details.get("resource_id", raw.get("id") if isinstance(raw, dict) else None)
            logger.warning(f"Skipping resource {resource_id}: {e.message}")
            errors.append(
                ResourceError(
                    resource_id=None if resource_id is None else str(resource_id),
                    code=e.code,
                    message=e.message,
                )
            )
            continue
        if availability:
            results.append(availability)

    filtered = filter_courts(results, options)
    logger.info(f"Found {len(filtered)} courts with availability after all filtering")

    return GridResolution(
        date=options.date,
        display_date=grid.display_date,
        availability=filtered,
        errors=errors,
        grid=raw_grid,
    )
