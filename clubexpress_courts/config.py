import logging
import os
from datetime import datetime, time
from typing import Dict, List

from clubexpress_courts.models import BookingPolicy

logger = logging.getLogger(__name__)

# --- Site ---
BASE_URL = os.environ.get("CLUBEXPRESS_BASE_URL", "https://spa.clubexpress.com")
SCHEDULE_PATH = "/handlers/res_sched.ashx"
COURTS_CATEGORY_ID = os.environ.get("COURTS_CATEGORY_ID", "1196")
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "30"))
DEBUG = os.environ.get("DEBUG", "false").lower() == "true"

# Headers to mimic a browser
COMMON_HEADERS: Dict[str, str] = {
    "User-Agent": os.environ.get(
        "SCRAPER_USER_AGENT",
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/129.0.0.0 Safari/537.36"
        ),
    ),
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": os.environ.get("SCRAPER_ACCEPT_LANGUAGE", "en-US,en;q=0.5"),
    "X-Requested-With": "XMLHttpRequest",
}

# --- Reservation policy ---
MAX_ADVANCE_DAYS = int(os.environ.get("MAX_ADVANCE_DAYS", "7"))
ADVANCE_WINDOW_OPEN_TIME = os.environ.get("ADVANCE_WINDOW_OPEN_TIME", "13:00")
MAX_BOOKINGS_PER_DAY = int(os.environ.get("MAX_BOOKINGS_PER_DAY", "1"))
SLOT_MINUTES = int(os.environ.get("SLOT_MINUTES", "15"))
BLOCK_MINUTES = int(os.environ.get("BLOCK_MINUTES", "90"))
DAY_START = os.environ.get("DAY_START", "08:00")
BLOCKS_PER_DAY = int(os.environ.get("BLOCKS_PER_DAY", "9"))
# Comma separated HH:MM values; empty means every block start of the day
VALID_START_TIMES = os.environ.get("VALID_START_TIMES", "")


def parse_time(value: str) -> time:
    """Parses an HH:MM string."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def parse_time_list(value: str) -> List[time]:
    times = []
    for part in value.split(","):
        if not part.strip():
            continue
        try:
            times.append(parse_time(part))
        except ValueError:
            logger.warning(f"Ignoring invalid start time '{part.strip()}' in VALID_START_TIMES")
    return times


def default_policy() -> BookingPolicy:
    """Builds the club's booking policy from the environment."""
    policy = BookingPolicy(
        max_advance_days=MAX_ADVANCE_DAYS,
        advance_window_open_time=parse_time(ADVANCE_WINDOW_OPEN_TIME),
        max_bookings_per_member_per_day=MAX_BOOKINGS_PER_DAY,
        block_duration_minutes=BLOCK_MINUTES,
        valid_start_times=parse_time_list(VALID_START_TIMES),
        slot_duration_minutes=SLOT_MINUTES,
        day_start=parse_time(DAY_START),
        blocks_per_day=BLOCKS_PER_DAY,
    )
    logger.debug(f"Loaded booking policy: {policy}")
    return policy
