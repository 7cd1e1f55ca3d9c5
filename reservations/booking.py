import logging
from functools import partial

from django.db import transaction

from . import inventory, ledger
from .errors import Conflict, InvalidRequest, RoomUnavailable
from .notifications import booking_confirmation, send_notification

logger = logging.getLogger(__name__)


def create_booking(user, room_id, check_in, check_out, guests):
    """Reserve ``room_id`` for [check_in, check_out) on behalf of ``user``.

    The price is derived here from the inventory rate, never from the
    request. Raises ``InvalidRequest``, ``RoomNotFound`` or
    ``RoomUnavailable``; the last one means the room exists but the dates
    are taken, so the client should offer different dates.
    """
    if check_in is None or check_out is None or check_out <= check_in:
        raise InvalidRequest("check_out must be after check_in")
    if guests is None or guests <= 0:
        raise InvalidRequest("guests must be a positive number")

    quote = inventory.resolve(room_id)
    nights = (check_out - check_in).days

    candidate = ledger.Candidate(
        user_id=user.id,
        room_id=quote.room_id,
        hotel_id=quote.hotel_id,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        total_cents=quote.nightly_rate_cents * nights,
    )
    try:
        reservation = ledger.insert_if_available(candidate)
    except Conflict:
        logger.info("Room %s unavailable for %s..%s", room_id, check_in, check_out)
        raise RoomUnavailable()

    logger.info("Booking %s created for user %s, room %s, %s nights, total %s",
                reservation.pk, user.id, quote.room_id, nights, reservation.total_cents)

    subject, body = booking_confirmation(reservation, quote, user.name or user.email)
    # Runs after commit, or immediately outside a transaction.
    transaction.on_commit(partial(send_notification, user.email, subject, body))
    return reservation
