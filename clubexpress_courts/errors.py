from enum import Enum
from typing import Any, Dict, Optional


class BookingRule(str, Enum):
    ONE_BOOKING_PER_DAY = "one_booking_per_day"
    ADVANCE_WINDOW = "advance_window"
    ADVANCE_WINDOW_OPENING = "advance_window_opening"
    BLOCK_DURATION = "block_duration"
    VALID_START_TIME = "valid_start_time"


class ClubExpressError(Exception):
    """Base error for the courts library. `code` is a stable identifier callers can switch on."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


class InvalidSlotRange(ClubExpressError):
    """Raised when slot bounds cannot be mapped onto the day's time grid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("COURTS_INVALID_SLOT_RANGE", message, details)


class AvailabilityResolutionError(ClubExpressError):
    """Raised when grid data for a resource is missing or malformed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("COURTS_AVAILABILITY_RESOLUTION_FAILED", message, details)


class BookingRuleViolation(ClubExpressError):
    """Raised when a booking request breaks one of the club's reservation rules."""

    def __init__(self, rule: BookingRule, message: str):
        super().__init__("COURTS_BOOKING_RULE_VIOLATION", message, {"rule": rule.value})
        self.rule = rule
