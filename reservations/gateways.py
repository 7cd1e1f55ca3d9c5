"""Stripe Checkout client and webhook signature verification.

Only the two calls the reservation core needs are implemented: creating a
hosted checkout session and verifying the ``Stripe-Signature`` header of an
inbound webhook.
"""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """The provider could not be reached or refused the request."""


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


class StripeCheckoutGateway:

    def __init__(self, secret_key=None, api_base=None, timeout=None, transport=None):
        self.secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self.api_base = (api_base or settings.STRIPE_API_BASE).rstrip("/")
        self.timeout = timeout or settings.PAYMENT_TIMEOUT_SECONDS
        self.transport = transport

    def create_checkout_session(self, amount, currency, description, success_url, cancel_url, metadata):
        """Create a one-line-item payment session; ``amount`` is in minor units."""
        form = {
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "line_items[0][quantity]": "1",
            "line_items[0][price_data][currency]": currency,
            "line_items[0][price_data][unit_amount]": str(amount),
            "line_items[0][price_data][product_data][name]": description,
        }
        for key, value in metadata.items():
            form[f"metadata[{key}]"] = str(value)

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(
                    f"{self.api_base}/v1/checkout/sessions",
                    data=form,
                    headers={"Authorization": f"Bearer {self.secret_key}"},
                )
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Checkout session request failed: %s", e)
            raise GatewayError(str(e)) from e

        if not body.get("id") or not body.get("url"):
            raise GatewayError("Checkout session response is missing id or url")
        return CheckoutSession(session_id=body["id"], url=body["url"])


def sign_payload(payload_bytes, secret, timestamp):
    signed = f"{timestamp}.".encode("utf-8") + payload_bytes
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def verify_signature(payload_bytes, header, secret, tolerance=None, now=None):
    """Check a ``t=<ts>,v1=<sig>`` header against the payload.

    Returns True only if one of the v1 signatures matches and the timestamp
    is within ``tolerance`` seconds of ``now``.
    """
    if not header or not secret:
        return False

    timestamp = None
    signatures = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1":
            signatures.append(value)
    if timestamp is None or not signatures:
        return False

    try:
        ts = int(timestamp)
    except ValueError:
        return False

    tolerance = settings.STRIPE_WEBHOOK_TOLERANCE if tolerance is None else tolerance
    now = time.time() if now is None else now
    if tolerance and abs(now - ts) > tolerance:
        return False

    expected = sign_payload(payload_bytes, secret, timestamp)
    return any(hmac.compare_digest(expected, sig) for sig in signatures)
