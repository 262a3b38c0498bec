from datetime import date, datetime, time
from typing import Annotated, Any, Dict, List

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

from clubexpress_courts import slots


def _as_str(value: Any) -> Any:
    return str(value) if isinstance(value, int) else value


# Vendor ids arrive as ints or strings
ResourceId = Annotated[str, BeforeValidator(_as_str)]


# --- Raw grid, as returned by the schedule endpoint ---


class ReservedRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_slot: int = Field(alias="firstTS")
    last_slot: int = Field(alias="lastTS")
    occupant_label: str | None = Field(default=None, alias="userName")
    usage_label: str | None = Field(default=None, alias="usageDescription")


class GridResource(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: ResourceId
    name: str
    first_available_slot: int = Field(alias="firstAvailableTS")
    last_available_slot: int = Field(alias="lastAvailableTS")
    reservations: List[ReservedRange] = []

    @field_validator("reservations", mode="before")
    @classmethod
    def _none_means_no_reservations(cls, value: Any) -> Any:
        return [] if value is None else value


class Grid(BaseModel):
    """Top level of a schedule grid. Resources stay raw so each one can fail on its own."""

    model_config = ConfigDict(populate_by_name=True)

    first_time_slot_index: int = Field(alias="firstTS")
    display_date: str | None = Field(default=None, alias="displayDate")
    current_date: str | None = Field(default=None, alias="currentDate")
    resources: List[Any]


# --- Resolved availability ---


class Court(BaseModel):
    id: ResourceId
    name: str
    type: str | None = None
    features: List[str] = []
    location: str | None = None


class TimeSlot(BaseModel):
    start_time: datetime
    end_time: datetime
    duration_minutes: int


class CourtAvailability(BaseModel):
    court: Court
    date: date
    available_slots: List[TimeSlot]


class ResourceError(BaseModel):
    resource_id: str | None
    code: str
    message: str


class GridResolution(BaseModel):
    date: date
    display_date: str | None = None
    availability: List[CourtAvailability] = []
    errors: List[ResourceError] = []
    grid: Dict[str, Any] = {}


class CourtFilterOptions(BaseModel):
    type: str | None = None
    features: List[str] = []
    location: str | None = None


class AvailabilityOptions(CourtFilterOptions):
    date: date
    start_time: datetime | None = None
    end_time: datetime | None = None
    min_duration_minutes: int | None = None


# --- Booking ---


class BookingPolicy(BaseModel):
    """A club's reservation rules. Frozen so a validation run always sees one consistent snapshot."""

    model_config = ConfigDict(frozen=True)

    max_advance_days: int = 7
    advance_window_open_time: time = time(13, 0)
    max_bookings_per_member_per_day: int = 1
    block_duration_minutes: int = 90
    valid_start_times: List[time] = []
    slot_duration_minutes: int = slots.SLOT_MINUTES
    day_start: time = time(8, 0)
    blocks_per_day: int = 9

    @property
    def block_size(self) -> int:
        return slots.block_size_in_slots(self.block_duration_minutes, self.slot_duration_minutes)

    def start_times(self) -> List[time]:
        """The explicit valid start times, or the calendar block template when none are configured."""
        if self.valid_start_times:
            return list(self.valid_start_times)
        return slots.block_start_times(
            self.day_start, self.block_duration_minutes, self.blocks_per_day, self.slot_duration_minutes
        )


class BookingRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    court_id: ResourceId
    date: date
    start_time: datetime
    end_time: datetime
    purpose: str | None = None
    category: str | None = None
    participants: List[str] = []

    @model_validator(mode="after")
    def _check_times(self) -> "BookingRequest":
        if (self.start_time.tzinfo is None) != (self.end_time.tzinfo is None):
            raise ValueError("start_time and end_time must both be naive or both carry a timezone")
        if self.start_time.date() != self.date:
            raise ValueError(f"start_time {self.start_time.isoformat()} is not on the booking date {self.date}")
        return self


class CourtBooking(BaseModel):
    id: ResourceId
    court: Court
    date: date
    start_time: datetime
    end_time: datetime
    duration_minutes: int | None = None
    status: str = "Confirmed"
    booked_by: str | None = None
    purpose: str | None = None
    category: str | None = None
    participants: List[str] = []
    created_at: datetime | None = None

    @model_validator(mode="after")
    def _derive_duration(self) -> "CourtBooking":
        if self.duration_minutes is None:
            self.duration_minutes = int((self.end_time - self.start_time).total_seconds() // 60)
        return self


class CancelBookingRequest(BaseModel):
    booking_id: str
    reason: str | None = None
