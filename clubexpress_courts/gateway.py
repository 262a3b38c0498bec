"""Contracts for the site gateway, plus a client for the JSON schedule grid.

Login, cookies and the HTML booking forms live behind `BookingGateway`; only the
schedule grid is a plain JSON endpoint, which `GridClient` fetches.
"""

import logging
import time
from datetime import date
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import urlencode

import cloudscraper
import requests

from clubexpress_courts import config
from clubexpress_courts.models import BookingRequest, CourtBooking

logger = logging.getLogger(__name__)


class GridSource(Protocol):
    def fetch_grid(self, category_id: str, day_offset: int) -> Dict[str, Any]:
        """Returns the raw schedule grid of a court category, `day_offset` days from today."""
        ...


class BookingGateway(Protocol):
    def fetch_existing_bookings(
        self, member_id: Optional[str], start: Optional[date] = None, end: Optional[date] = None
    ) -> List[CourtBooking]:
        ...

    def submit_booking(self, request: BookingRequest) -> CourtBooking:
        ...

    def submit_cancellation(self, booking_id: str, reason: Optional[str] = None) -> bool:
        ...


class GridClient:
    """GridSource backed by the club site's schedule handler."""

    def __init__(self, base_url: str = config.BASE_URL, timeout: float = config.REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._scraper: Optional[requests.Session] = None

    @property
    def scraper(self) -> requests.Session:
        if self._scraper is None:
            self._scraper = cloudscraper.create_scraper()
        return self._scraper

    def build_url(self, category_id: str, day_offset: int) -> str:
        """Constructs the schedule URL. The trailing timestamp defeats caching."""
        qs = {"type": "g", "cat": category_id, "d": day_offset, "_": int(time.time() * 1000)}
        url = f"{self.base_url}{config.SCHEDULE_PATH}?{urlencode(qs)}"
        logger.debug(f"Built URL: {url}")
        return url

    def fetch_grid(self, category_id: str, day_offset: int) -> Dict[str, Any]:
        url = self.build_url(category_id, day_offset)
        logger.info(f"Fetching grid for category {category_id}, day offset {day_offset}")
        try:
            response = self.scraper.get(url, headers=config.COMMON_HEADERS, timeout=self.timeout)
            logger.debug(f"Response status: {response.status_code}")
            response.raise_for_status()
            data: Dict[str, Any] = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching grid: {e}")
            raise
        logger.debug(f"Received grid with display date {data.get('displayDate')}")
        return data
