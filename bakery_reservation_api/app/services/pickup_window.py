"""
Pickup time rules for reservations.

Breads can be picked up between 9 a.m. and the last slot before 8 p.m.:
the hour of the requested time must be strictly greater than
``OPENING_HOUR`` and strictly less than ``CLOSING_HOUR``.  Only the hour
field is checked against the window, so 19:59 is accepted while 20:00
is not.  The pickup time must also lie in the future.
"""

from datetime import datetime
from typing import Optional

from bakery_reservation_api.app.core.exceptions import ValidationFailedError


OPENING_HOUR = 8
CLOSING_HOUR = 20


def is_valid_bring_time(bring_time: datetime, now: datetime) -> bool:
    return bring_time > now and OPENING_HOUR < bring_time.hour < CLOSING_HOUR


def validate_bring_time(bring_time: datetime, now: Optional[datetime] = None) -> None:
    """Raise ``ValidationFailedError`` if ``bring_time`` cannot be accepted.

    ``now`` defaults to the current local time; tests inject a fixed
    value.
    """
    current_time = now or datetime.now()
    if not is_valid_bring_time(bring_time, current_time):
        raise ValidationFailedError(f"{bring_time.isoformat()} is not a valid pickup time")
