"""
Booking status transitions.

completed and cancelled are terminal. A driver may revise an alternative
offer, so driver_alternative may transition to itself.
"""

from typing import Dict, FrozenSet

from omnibus.app.core.exceptions import InvalidStateError
from omnibus.app.models.enums import BookingStatus, DriverResponse

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED, BookingStatus.DRIVER_ALTERNATIVE, BookingStatus.CANCELLED,
    }),
    BookingStatus.PENDING_DRIVER_CONFIRMATION: frozenset({
        BookingStatus.CONFIRMED, BookingStatus.DRIVER_ALTERNATIVE, BookingStatus.CANCELLED,
    }),
    BookingStatus.DRIVER_ALTERNATIVE: frozenset({
        BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.DRIVER_ALTERNATIVE,
    }),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.IN_TRANSIT, BookingStatus.CANCELLED}),
    BookingStatus.IN_TRANSIT: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Statuses in which a driver response is meaningful
DRIVER_RESPONSE_SOURCES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.PENDING_DRIVER_CONFIRMATION,
    BookingStatus.DRIVER_ALTERNATIVE,
})

DRIVER_RESPONSE_TARGETS: Dict[DriverResponse, BookingStatus] = {
    DriverResponse.ACCEPTED: BookingStatus.CONFIRMED,
    DriverResponse.ALTERNATIVE_OFFERED: BookingStatus.DRIVER_ALTERNATIVE,
    DriverResponse.DECLINED: BookingStatus.CANCELLED,
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: BookingStatus, target: BookingStatus, action: str) -> None:
    """
    Raises:
        InvalidStateError: If ``current`` does not allow moving to ``target``
    """
    if not can_transition(current, target):
        raise InvalidStateError("booking", current.value, action)
