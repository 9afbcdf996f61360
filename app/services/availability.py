"""
Availability classification
STRICT answers "can a user rent this car right now" and needs a positive signal.
SOFT answers "is this car obviously busy" and is only used for zone discovery.
ALL disables the check.
"""

import re
from enum import Enum
from typing import Any, Dict
from services.field_rules import (
    AVAILABLE_FLAG_RULES,
    BUSY_FLAG_RULES,
    STATUS_RULES,
    pick_all,
)

FREE_STATUS = re.compile(r"free|avail|ready|wolny|dostepn", re.IGNORECASE)
BUSY_STATUS = re.compile(
    r"(?<![a-z])rent(?!able)|busy|reserv|occupied|unavailable|taken|maintenance",
    re.IGNORECASE,
)


class Policy(str, Enum):
    STRICT = "strict"
    SOFT = "soft"
    ALL = "all"


def has_busy_signal(record: Dict[str, Any]) -> bool:
    """Reserved/rented flag, busy status, or an explicit available: false"""
    if any(pick_all(record, BUSY_FLAG_RULES)):
        return True
    if False in pick_all(record, AVAILABLE_FLAG_RULES):
        return True
    return any(BUSY_STATUS.search(s) for s in pick_all(record, STATUS_RULES))


def has_free_signal(record: Dict[str, Any]) -> bool:
    if True in pick_all(record, AVAILABLE_FLAG_RULES):
        return True
    statuses = pick_all(record, STATUS_RULES)
    # "UNAVAILABLE" contains "available"; busy wins
    return any(FREE_STATUS.search(s) and not BUSY_STATUS.search(s) for s in statuses)


def is_available(record: Dict[str, Any], policy: Policy = Policy.STRICT) -> bool:
    if policy == Policy.ALL:
        return True
    if has_busy_signal(record):
        return False
    if policy == Policy.SOFT:
        return True
    return has_free_signal(record)
