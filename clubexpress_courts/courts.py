import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from clubexpress_courts import availability, config, rules, slots
from clubexpress_courts.logs import configure_package_logging
from clubexpress_courts.classify import classify_court
from clubexpress_courts.errors import ClubExpressError
from clubexpress_courts.gateway import BookingGateway, GridSource
from clubexpress_courts.models import (
    AvailabilityOptions,
    BookingPolicy,
    BookingRequest,
    CancelBookingRequest,
    Court,
    CourtAvailability,
    CourtBooking,
    CourtFilterOptions,
    GridResolution,
)

logger = logging.getLogger(__name__)


class CourtsService:
    """Court discovery, availability and booking for one club member.

    Fetching and submitting go through the gateway; resolving the grid and checking
    the club rules happen locally before anything is submitted.
    """

    def __init__(
        self,
        grid_source: GridSource,
        booking_gateway: Optional[BookingGateway] = None,
        policy: Optional[BookingPolicy] = None,
        category_id: str = config.COURTS_CATEGORY_ID,
        member_id: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
        debug: bool = config.DEBUG,
    ):
        configure_package_logging(debug)
        self.grid_source = grid_source
        self.booking_gateway = booking_gateway
        self.policy = policy or config.default_policy()
        self.category_id = category_id
        self.member_id = member_id
        self.clock = clock

    def _gateway(self) -> BookingGateway:
        if self.booking_gateway is None:
            raise ClubExpressError(
                "COURTS_NOT_AUTHENTICATED", "A member booking gateway is required to read or submit bookings"
            )
        return self.booking_gateway

    def resolve_day(self, options: AvailabilityOptions) -> GridResolution:
        """Fetches the grid for the requested date and resolves it. The result keeps the raw grid."""
        offset = slots.day_offset(options.date, self.clock().date())
        logger.debug(f"Date offset from today: {offset} days")
        raw_grid = self.grid_source.fetch_grid(self.category_id, offset)
        return availability.resolve_grid(raw_grid, options, self.policy)

    def find_available_courts(self, options: AvailabilityOptions) -> List[CourtAvailability]:
        logger.info(f"Finding available courts for date: {options.date}")
        return self.resolve_day(options).availability

    def find_all_courts(self, options: Optional[CourtFilterOptions] = None, on: Optional[date] = None) -> List[Court]:
        """Lists the courts of the category as shown on the grid for `on` (default today)."""
        options = options or CourtFilterOptions()
        day = on or self.clock().date()
        offset = slots.day_offset(day, self.clock().date())
        grid = availability.parse_grid(self.grid_source.fetch_grid(self.category_id, offset))

        courts = []
        for raw in grid.resources:
            if not isinstance(raw, dict) or "id" not in raw or not isinstance(raw.get("name"), str):
                logger.warning(f"Skipping grid resource without id or name: {raw}")
                continue
            courts.append(classify_court(raw["id"], raw["name"]))
        logger.debug(f"Found {len(courts)} courts")

        return [court for court in courts if availability.court_matches(court, options)]

    def get_my_bookings(self, start: Optional[date] = None, end: Optional[date] = None) -> List[CourtBooking]:
        bookings = self._gateway().fetch_existing_bookings(self.member_id, start, end)
        logger.debug(f"Found {len(bookings)} bookings")
        return bookings

    def check_booking(self, request: BookingRequest) -> None:
        """Raises BookingRuleViolation if the request breaks a club rule."""
        existing = self.get_my_bookings(request.date, request.date)
        rules.validate_booking(request, self.policy, existing, now=self.clock())

    def book_court(self, request: BookingRequest) -> CourtBooking:
        logger.info(f"Booking court {request.court_id} for {request.date} at {request.start_time:%H:%M}")
        self.check_booking(request)
        booking = self._gateway().submit_booking(request)
        logger.info(f"Booked court {request.court_id}: booking {booking.id} ({booking.status})")
        return booking

    def cancel_booking(self, request: CancelBookingRequest) -> bool:
        logger.info(f"Cancelling booking {request.booking_id}")
        return self._gateway().submit_cancellation(request.booking_id, request.reason)
