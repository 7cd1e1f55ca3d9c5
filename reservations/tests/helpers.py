import json
import time
from datetime import date

from reservations.authentication import Principal
from reservations.gateways import CheckoutSession, sign_payload
from reservations.models import Hotel, Room

WEBHOOK_SECRET = 'whsec_test_secret'


def make_room(number='101', price_cents=1000, owner_id='owner_1', hotel=None, **extra):
    if hotel is None:
        hotel = Hotel.objects.create(
            name=f'Hotel {number}', address='1 Beach Road', city='Goa', owner_id=owner_id,
        )
    return Room.objects.create(hotel=hotel, number=number, price_cents=price_cents, **extra)


def guest(user_id='user_1'):
    return Principal(id=user_id, email=f'{user_id}@example.com', name=f'Guest {user_id}')


def d(value):
    return date.fromisoformat(value)


class FakeGateway:
    """Checkout gateway that records calls instead of talking to the provider."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def create_checkout_session(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        session_id = f'cs_test_{len(self.calls)}'
        return CheckoutSession(session_id=session_id, url=f'https://checkout.stripe.com/c/pay/{session_id}')


def webhook_event(event_type, reservation_id, session_id='cs_test_1', payment_status='paid'):
    obj = {'id': session_id, 'object': 'checkout.session', 'payment_status': payment_status}
    if reservation_id is not None:
        obj['metadata'] = {'reservationId': str(reservation_id)}
    return json.dumps({'id': 'evt_1', 'type': event_type, 'data': {'object': obj}}).encode('utf-8')


def signature_header(payload, secret=WEBHOOK_SECRET, timestamp=None):
    timestamp = int(time.time()) if timestamp is None else timestamp
    return f't={timestamp},v1={sign_payload(payload, secret, str(timestamp))}'
