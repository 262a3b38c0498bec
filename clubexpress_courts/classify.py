"""Keyword tagging of courts by their display name.

The schedule grid only gives a court's name, so type, features and location are
inferred from keywords. Each table is checked top to bottom.
"""

import logging
import re
from typing import List, Pattern, Tuple

from clubexpress_courts.models import Court

logger = logging.getLogger(__name__)

TagRule = Tuple[Pattern[str], str]


def _rule(pattern: str, tag: str) -> TagRule:
    return re.compile(pattern, re.IGNORECASE), tag


# First match wins
TYPE_RULES: List[TagRule] = [
    _rule(r"pickleball", "Pickleball"),
    _rule(r"squash", "Squash"),
    _rule(r"racquetball", "Racquetball"),
    _rule(r"badminton", "Badminton"),
]
DEFAULT_TYPE = "Tennis"

# Every match is kept, in table order
FEATURE_RULES: List[TagRule] = [
    _rule(r"indoor", "Indoor"),
    _rule(r"outdoor", "Outdoor"),
    _rule(r"clay", "Clay"),
    _rule(r"hard", "Hard"),
    _rule(r"grass", "Grass"),
    _rule(r"lighted|lights", "Lighted"),
]

# First match wins
LOCATION_RULES: List[TagRule] = [
    _rule(r"north", "North"),
    _rule(r"south", "South"),
    _rule(r"east", "East"),
    _rule(r"west", "West"),
    _rule(r"center", "Center"),
]
DEFAULT_LOCATION = "Main"


def first_tag(name: str, rules: List[TagRule], default: str) -> str:
    for pattern, tag in rules:
        if pattern.search(name):
            return tag
    return default


def all_tags(name: str, rules: List[TagRule]) -> List[str]:
    return [tag for pattern, tag in rules if pattern.search(name)]


def classify_court(court_id: str, name: str) -> Court:
    """Builds a Court with its type, features and location derived from the name."""
    court = Court(
        id=court_id,
        name=name,
        type=first_tag(name, TYPE_RULES, DEFAULT_TYPE),
        features=all_tags(name, FEATURE_RULES),
        location=first_tag(name, LOCATION_RULES, DEFAULT_LOCATION),
    )
    logger.debug(f"Classified {name!r} as {court.type} at {court.location} with features {court.features}")
    return court
