"""Payment reconciliation.

A reservation's payment status is a small state machine driven from two
sides: the guest starting a checkout (``begin_payment``) and the provider
reporting the result (``confirm_payment``, reached through
``handle_webhook``). Every transition is a compare-and-set in the ledger, so
duplicate or concurrent deliveries apply at most once.
"""

import json
import logging
from dataclasses import dataclass

from django.conf import settings

from . import ledger
from .errors import AlreadyPaid, Conflict, PaymentProviderError, ReservationNotFound, WebhookRejected
from .gateways import GatewayError, StripeCheckoutGateway, verify_signature
from .models import PaymentStatus

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
FAILED = "failed"

# Bound on compare-and-set retries while settling a success.
SETTLE_ATTEMPTS = 4

# Provider event type -> outcome. checkout.session.completed is handled
# separately because a completed session may still be awaiting funds.
EVENT_OUTCOMES = {
    "checkout.session.async_payment_succeeded": SUCCEEDED,
    "checkout.session.async_payment_failed": FAILED,
    "checkout.session.expired": FAILED,
}


@dataclass(frozen=True)
class PaymentSession:
    reservation_id: str
    session_id: str
    url: str


class PaymentReconciler:

    def __init__(self, gateway=None):
        self.gateway = gateway or StripeCheckoutGateway()

    def begin_payment(self, reservation_id, user=None, origin=None):
        """Open a checkout session for the reservation's stored total.

        The status moves to PENDING before the provider is called so a fast
        webhook can never arrive ahead of it. A PENDING reservation may be
        paid again (the guest abandoned an earlier checkout page).
        """
        reservation = ledger.find_by_id(reservation_id)
        if user is not None and reservation.user_id != user.id:
            raise ReservationNotFound(f"Booking {reservation_id} not found.")
        if reservation.payment_status == PaymentStatus.PAID:
            raise AlreadyPaid()

        if reservation.payment_status != PaymentStatus.PENDING:
            try:
                reservation = ledger.update_payment_status(
                    reservation.pk, reservation.payment_status, PaymentStatus.PENDING
                )
            except Conflict:
                reservation = ledger.find_by_id(reservation.pk)
                if reservation.payment_status == PaymentStatus.PAID:
                    raise AlreadyPaid()
                raise

        base_url = (origin or settings.FRONTEND_URL).rstrip("/")
        try:
            session = self.gateway.create_checkout_session(
                amount=reservation.total_cents,
                currency=settings.PAYMENT_CURRENCY,
                description=reservation.hotel.name,
                success_url=f"{base_url}/loader/my-bookings",
                cancel_url=f"{base_url}/my-bookings",
                metadata={"reservationId": str(reservation.pk)},
            )
        except GatewayError as e:
            raise PaymentProviderError() from e

        if not ledger.attach_payment_session(reservation.pk, session.session_id):
            # Settled by a webhook while the session was being created.
            reservation = ledger.find_by_id(reservation.pk)
            if reservation.payment_status == PaymentStatus.PAID:
                raise AlreadyPaid()
            raise Conflict(f"Booking {reservation.pk} payment is {reservation.payment_status}.")

        logger.info("Checkout session %s opened for booking %s", session.session_id, reservation.pk)
        return PaymentSession(reservation_id=str(reservation.pk), session_id=session.session_id, url=session.url)

    def confirm_payment(self, reservation_id, outcome, session_id=None):
        """Apply a provider-asserted outcome. Never raises for known races.

        Returns the reservation, or None if the id is unknown.
        """
        if outcome not in (SUCCEEDED, FAILED):
            raise ValueError(f"Unknown payment outcome {outcome!r}")
        target = PaymentStatus.PAID if outcome == SUCCEEDED else PaymentStatus.FAILED

        try:
            reservation = ledger.find_by_id(reservation_id)
        except ReservationNotFound:
            logger.warning("Payment %s for unknown booking %s ignored", outcome, reservation_id)
            return None

        stale = session_id and reservation.payment_session_id and session_id != reservation.payment_session_id
        if outcome == FAILED and stale:
            logger.info("Stale failure from session %s for booking %s ignored", session_id, reservation.pk)
            return reservation

        try:
            return ledger.update_payment_status(reservation.pk, PaymentStatus.PENDING, target)
        except Conflict:
            current = ledger.find_by_id(reservation.pk)

        if outcome == SUCCEEDED and current.payment_status != PaymentStatus.PAID:
            return self._settle(current)

        logger.info("Payment %s for booking %s not applied, status is %s",
                    outcome, current.pk, current.payment_status)
        return current

    def _settle(self, current):
        """Drive an unsettled reservation to PAID; money was taken.

        Each step is a compare-and-set, so racing deliveries write PAID once.
        """
        for _ in range(SETTLE_ATTEMPTS):
            if current.payment_status == PaymentStatus.PAID:
                return current
            target = PaymentStatus.PENDING if current.payment_status == PaymentStatus.UNPAID else PaymentStatus.PAID
            try:
                current = ledger.update_payment_status(current.pk, current.payment_status, target)
            except Conflict:
                current = ledger.find_by_id(current.pk)
        logger.warning("Booking %s not settled after %d attempts, status is %s",
                       current.pk, SETTLE_ATTEMPTS, current.payment_status)
        return current

    def handle_webhook(self, payload, signature_header):
        """Verify and apply one provider callback.

        Raises ``WebhookRejected`` for unsigned or malformed callbacks. Events
        that carry no reservation are acknowledged and ignored.
        """
        if not verify_signature(payload, signature_header, settings.STRIPE_WEBHOOK_SECRET):
            logger.warning("Webhook rejected: bad signature")
            raise WebhookRejected("Invalid webhook signature.")

        try:
            event = json.loads(payload)
            event_type = event["type"]
            session = event["data"]["object"]
        except (ValueError, KeyError, TypeError):
            raise WebhookRejected("Malformed webhook payload.")

        if event_type == "checkout.session.completed":
            outcome = SUCCEEDED if session.get("payment_status") in ("paid", "no_payment_required") else None
        else:
            outcome = EVENT_OUTCOMES.get(event_type)
        if outcome is None:
            logger.debug("Webhook %s ignored", event_type)
            return None

        reservation_id = (session.get("metadata") or {}).get("reservationId")
        if not reservation_id:
            logger.warning("Webhook %s without reservationId ignored", event_type)
            return None

        return self.confirm_payment(reservation_id, outcome, session_id=session.get("id"))
