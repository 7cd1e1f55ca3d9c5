import time
from urllib.parse import parse_qs

import httpx
from django.test import SimpleTestCase, override_settings

from reservations.gateways import GatewayError, StripeCheckoutGateway, sign_payload, verify_signature


def make_gateway(handler):
    return StripeCheckoutGateway(
        secret_key='sk_test_123',
        api_base='https://stripe.test/',
        timeout=2,
        transport=httpx.MockTransport(handler),
    )


class CheckoutSessionTestCase(SimpleTestCase):

    def _create(self, gateway):
        return gateway.create_checkout_session(
            amount=2000,
            currency='inr',
            description='Seaside Residency',
            success_url='https://hotels.example.com/loader/my-bookings',
            cancel_url='https://hotels.example.com/my-bookings',
            metadata={'reservationId': 'abc'},
        )

    def test_form_encoded_request(self):
        seen = {}

        def handler(request):
            seen['url'] = str(request.url)
            seen['auth'] = request.headers['Authorization']
            seen['form'] = parse_qs(request.content.decode())
            return httpx.Response(200, json={'id': 'cs_test_1', 'url': 'https://checkout.stripe.com/c/pay/cs_test_1'})

        session = self._create(make_gateway(handler))

        self.assertEqual(session.session_id, 'cs_test_1')
        self.assertEqual(session.url, 'https://checkout.stripe.com/c/pay/cs_test_1')
        self.assertEqual(seen['url'], 'https://stripe.test/v1/checkout/sessions')
        self.assertEqual(seen['auth'], 'Bearer sk_test_123')
        form = seen['form']
        self.assertEqual(form['mode'], ['payment'])
        self.assertEqual(form['line_items[0][price_data][unit_amount]'], ['2000'])
        self.assertEqual(form['line_items[0][price_data][currency]'], ['inr'])
        self.assertEqual(form['line_items[0][price_data][product_data][name]'], ['Seaside Residency'])
        self.assertEqual(form['metadata[reservationId]'], ['abc'])

    def test_provider_error_status(self):
        gateway = make_gateway(lambda request: httpx.Response(500, json={'error': {'message': 'boom'}}))
        with self.assertRaises(GatewayError):
            self._create(gateway)

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError('connection refused', request=request)

        with self.assertRaises(GatewayError):
            self._create(make_gateway(handler))

    def test_incomplete_response(self):
        gateway = make_gateway(lambda request: httpx.Response(200, json={'id': 'cs_test_1'}))
        with self.assertRaises(GatewayError):
            self._create(gateway)


@override_settings(STRIPE_WEBHOOK_TOLERANCE=300)
class SignatureTestCase(SimpleTestCase):
    secret = 'whsec_abc'
    payload = b'{"type": "checkout.session.completed"}'

    def test_valid_signature(self):
        ts = int(time.time())
        header = f't={ts},v1={sign_payload(self.payload, self.secret, str(ts))}'
        self.assertTrue(verify_signature(self.payload, header, self.secret))

    def test_any_v1_signature_may_match(self):
        ts = 1700000000
        good = sign_payload(self.payload, self.secret, str(ts))
        header = f't={ts},v1=deadbeef,v1={good}'
        self.assertTrue(verify_signature(self.payload, header, self.secret, now=ts + 10))

    def test_rejections(self):
        ts = 1700000000
        good = sign_payload(self.payload, self.secret, str(ts))
        cases = {
            'old timestamp': (f't={ts},v1={good}', self.secret, ts + 301),
            'wrong secret': (f't={ts},v1={good}', 'whsec_other', ts),
            'no timestamp': (f'v1={good}', self.secret, ts),
            'no signature': (f't={ts}', self.secret, ts),
            'bad timestamp': (f't=soon,v1={good}', self.secret, ts),
            'empty header': ('', self.secret, ts),
            'no secret configured': (f't={ts},v1={good}', '', ts),
        }
        for name, (header, secret, now) in cases.items():
            with self.subTest(name):
                self.assertFalse(verify_signature(self.payload, header, secret, now=now))
