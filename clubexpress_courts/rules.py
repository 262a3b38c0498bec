import logging
from datetime import datetime, timedelta
from typing import List, Optional

from clubexpress_courts.errors import BookingRule, BookingRuleViolation
from clubexpress_courts.models import BookingPolicy, BookingRequest, CourtBooking

logger = logging.getLogger(__name__)


def _format_time(value) -> str:
    return value.strftime("%H:%M")


def find_violation(
    request: BookingRequest,
    policy: BookingPolicy,
    existing_bookings: List[CourtBooking],
    now: Optional[datetime] = None,
) -> Optional[BookingRuleViolation]:
    """Checks a booking request against the club rules and returns the first broken one.

    Rules are checked in a fixed order: bookings per day, advance window, advance window
    opening time, block duration, valid start time. Returns None when the request passes.
    """
    policy = policy.model_copy(deep=True)
    now = now or datetime.now()
    today = now.date()

    same_day = [b for b in existing_bookings if b.date == request.date]
    if len(same_day) >= policy.max_bookings_per_member_per_day:
        if policy.max_bookings_per_member_per_day == 1:
            message = "You can only reserve one court per day. You already have a booking for this date."
        else:
            message = (
                f"You can only reserve {policy.max_bookings_per_member_per_day} courts per day. "
                f"You already have {len(same_day)} bookings for this date."
            )
        return BookingRuleViolation(BookingRule.ONE_BOOKING_PER_DAY, message)

    max_booking_date = today + timedelta(days=policy.max_advance_days)
    if request.date > max_booking_date:
        return BookingRuleViolation(
            BookingRule.ADVANCE_WINDOW,
            f"Reservations can only be made up to {policy.max_advance_days} days in advance "
            f"(until {max_booking_date.isoformat()}).",
        )

    if request.date == max_booking_date and now.time() < policy.advance_window_open_time:
        return BookingRuleViolation(
            BookingRule.ADVANCE_WINDOW_OPENING,
            f"Reservations for {max_booking_date.isoformat()} open at "
            f"{_format_time(policy.advance_window_open_time)} today.",
        )

    duration = request.end_time - request.start_time
    if duration != timedelta(minutes=policy.block_duration_minutes):
        return BookingRuleViolation(
            BookingRule.BLOCK_DURATION,
            f"Reservations must be made in {policy.block_duration_minutes}-minute blocks "
            f"(requested {int(duration.total_seconds() // 60)} minutes).",
        )

    start_times = policy.start_times()
    start = (request.start_time.hour, request.start_time.minute)
    if start not in {(t.hour, t.minute) for t in start_times}:
        return BookingRuleViolation(
            BookingRule.VALID_START_TIME,
            f"Reservations must start at valid times ({', '.join(_format_time(t) for t in start_times)}).",
        )

    return None


def validate_booking(
    request: BookingRequest,
    policy: BookingPolicy,
    existing_bookings: List[CourtBooking],
    now: Optional[datetime] = None,
) -> None:
    """Raises BookingRuleViolation for the first rule the request breaks."""
    violation = find_violation(request, policy, existing_bookings, now)
    if violation:
        logger.info(f"Booking of court {request.court_id} on {request.date} rejected: {violation.rule.value}")
        raise violation
    logger.debug(f"Booking of court {request.court_id} on {request.date} passes all club rules")
