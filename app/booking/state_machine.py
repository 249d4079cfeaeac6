"""
Reservation status state machine.

pending -> confirmed -> accepted | denied
pending -> cancelled
confirmed -> cancelled (admin only)

accepted, denied and cancelled are terminal.
"""

from typing import Dict, FrozenSet, Tuple

from app.booking.errors import AccessDenied, InvalidTransition
from app.models.reservation import ReservationStatus

ACTIVE_STATUSES: FrozenSet[ReservationStatus] = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CONFIRMED}
)

ADMIN_VISIBLE_STATUSES: FrozenSet[ReservationStatus] = frozenset(
    {ReservationStatus.CONFIRMED, ReservationStatus.ACCEPTED, ReservationStatus.DENIED}
)

# Statuses only an admin may ever request
ADMIN_DECISIONS: FrozenSet[ReservationStatus] = frozenset(
    {ReservationStatus.ACCEPTED, ReservationStatus.DENIED}
)

# (from, to) -> admin only
TRANSITIONS: Dict[Tuple[ReservationStatus, ReservationStatus], bool] = {
    (ReservationStatus.PENDING, ReservationStatus.CONFIRMED): False,
    (ReservationStatus.PENDING, ReservationStatus.CANCELLED): False,
    (ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED): True,
    (ReservationStatus.CONFIRMED, ReservationStatus.ACCEPTED): True,
    (ReservationStatus.CONFIRMED, ReservationStatus.DENIED): True,
}


def next_statuses(current: ReservationStatus) -> FrozenSet[ReservationStatus]:
    """All statuses reachable in one step, for any actor"""
    return frozenset(to for (frm, to) in TRANSITIONS if frm == current)


def is_terminal(status: ReservationStatus) -> bool:
    return not next_statuses(status)


def check_transition(
    current: ReservationStatus,
    requested: ReservationStatus,
    *,
    is_owner: bool,
    is_admin: bool,
) -> None:
    """
    Validate a status change for the given actor.

    Raises AccessDenied for role or ownership violations and
    InvalidTransition when the edge does not exist.
    """
    current = ReservationStatus(current)
    requested = ReservationStatus(requested)

    if not (is_owner or is_admin):
        raise AccessDenied("Access denied")

    if requested in ADMIN_DECISIONS and not is_admin:
        raise AccessDenied("Only admins can accept or deny reservations")

    admin_only = TRANSITIONS.get((current, requested))
    if admin_only is None:
        raise InvalidTransition(current.value, requested.value)

    if admin_only and not is_admin:
        raise AccessDenied(
            f"Only admins can change a {current.value} reservation to {requested.value}"
        )
