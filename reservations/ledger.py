"""Reservation ledger: the only write path for reservations.

``insert_if_available`` is the enforcement point of the no-double-booking
rule. Inside one transaction it locks the room row, re-checks overlap and
claims every night of the stay in ``RoomNight``; the unique (room, night)
constraint rejects a concurrent claim even where row locks are unsupported.

``update_payment_status`` is a compare-and-set on the stored status.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction, IntegrityError
from django.db.models import Count, Sum

from .availability import overlapping_reservations
from .errors import Conflict, ReservationNotFound
from .models import Room, Reservation, RoomNight, PaymentStatus, PAYMENT_TRANSITIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    user_id: str
    room_id: int
    hotel_id: int
    check_in: date
    check_out: date
    guests: int
    total_cents: int


def _nights(check_in, check_out):
    return [check_in + timedelta(days=i) for i in range((check_out - check_in).days)]


def insert_if_available(candidate):
    """Persist ``candidate`` unless its room is taken for any of its nights.

    Raises ``Conflict`` and writes nothing when the interval overlaps an
    existing confirmed reservation.
    """
    try:
        with transaction.atomic():
            # Serialise writers for this room; the row itself is not modified.
            Room.objects.select_for_update().filter(pk=candidate.room_id).first()

            if overlapping_reservations(candidate.room_id, candidate.check_in, candidate.check_out).exists():
                raise Conflict("Room is not available for the selected dates")

            reservation = Reservation.objects.create(
                user_id=candidate.user_id,
                room_id=candidate.room_id,
                hotel_id=candidate.hotel_id,
                check_in=candidate.check_in,
                check_out=candidate.check_out,
                guests=candidate.guests,
                total_cents=candidate.total_cents,
                payment_status=PaymentStatus.UNPAID,
                status=Reservation.Status.CONFIRMED,
            )
            RoomNight.objects.bulk_create([
                RoomNight(room_id=candidate.room_id, reservation=reservation, night=night)
                for night in _nights(candidate.check_in, candidate.check_out)
            ])
    except IntegrityError:
        logger.info("Night claim collided for room %s %s..%s",
                    candidate.room_id, candidate.check_in, candidate.check_out)
        raise Conflict("Room is not available for the selected dates")
    return reservation


def find_by_id(reservation_id):
    try:
        return Reservation.objects.select_related("room", "hotel").get(pk=reservation_id)
    except (Reservation.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise ReservationNotFound(f"Booking {reservation_id} not found.")


def list_by_user(user_id):
    return Reservation.objects.select_related("room", "hotel").filter(user_id=user_id).order_by("-created_at")


def list_by_hotel(hotel_id):
    return Reservation.objects.select_related("room", "hotel").filter(hotel_id=hotel_id).order_by("-created_at")


def hotel_summary(hotel_id):
    totals = Reservation.objects.filter(hotel_id=hotel_id).aggregate(
        total_bookings=Count("pk"),
        total_revenue=Sum("total_cents"),
    )
    return totals["total_bookings"], totals["total_revenue"] or 0


def attach_payment_session(reservation_id, session_id):
    """Record the provider session while the payment is still PENDING."""
    return bool(
        Reservation.objects.filter(pk=reservation_id, payment_status=PaymentStatus.PENDING)
        .update(payment_session_id=session_id)
    )


def update_payment_status(reservation_id, expected, target):
    """Move payment status from ``expected`` to ``target`` atomically.

    Returns the reservation. If the stored status already equals ``target``
    nothing is written. Raises ``Conflict`` if the stored status is anything
    else, or if ``expected -> target`` is not a legal move.
    """
    if target not in PAYMENT_TRANSITIONS[PaymentStatus(expected)]:
        raise Conflict(f"Payment cannot move from {expected} to {target}.")

    reservation = find_by_id(reservation_id)
    updated = Reservation.objects.filter(pk=reservation.pk, payment_status=expected).update(
        payment_status=target
    )
    reservation.refresh_from_db()
    if updated:
        logger.info("Booking %s payment %s -> %s", reservation_id, expected, target)
        return reservation
    if reservation.payment_status == target:
        return reservation
    raise Conflict(
        f"Booking {reservation_id} payment is {reservation.payment_status}, expected {expected}."
    )
