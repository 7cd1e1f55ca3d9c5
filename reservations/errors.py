import logging

from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, AuthenticationFailed, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BookingError(APIException):
    """Base class for errors raised by the reservation core.

    Every subclass carries a stable ``default_code`` that clients branch on
    and an HTTP status used when the error reaches the API layer.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "booking_error"
    default_detail = "Booking request failed."


class InvalidRequest(BookingError):
    default_code = "invalid_request"
    default_detail = "Invalid booking request."


class RoomNotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "room_not_found"
    default_detail = "Room not found."


class RoomUnavailable(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "room_unavailable"
    default_detail = "Room is not available for the selected dates."


class HotelNotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "hotel_not_found"
    default_detail = "No hotel found."


class ReservationNotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "reservation_not_found"
    default_detail = "Booking not found."


class AlreadyPaid(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "already_paid"
    default_detail = "Booking is already paid."


class PaymentProviderError(BookingError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "payment_provider_error"
    default_detail = "Payment provider is unavailable, try again."


class Conflict(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"
    default_detail = "The record was changed by another request."


class WebhookRejected(BookingError):
    default_code = "webhook_rejected"
    default_detail = "Webhook rejected."


def api_exception_handler(exc, context):
    """Render every API error as ``{success, error, message}``."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, BookingError):
        code = exc.default_code
        message = str(exc.detail)
    elif isinstance(exc, ValidationError):
        code = InvalidRequest.default_code
        message = _flatten_detail(exc.detail)
        response.status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        code = "not_authenticated"
        message = str(exc.detail)
    else:
        code = getattr(exc, "default_code", "error")
        message = _flatten_detail(getattr(exc, "detail", str(exc)))

    if response.status_code >= 500:
        logger.warning("API error %s: %s", code, message)

    return Response(
        {"success": False, "error": code, "message": message},
        status=response.status_code,
        headers=_retained_headers(response),
    )


def _retained_headers(response):
    return {k: v for k, v in response.items() if k in ("WWW-Authenticate", "Retry-After")}


def _flatten_detail(detail):
    if isinstance(detail, dict):
        parts = []
        for field, value in detail.items():
            text = _flatten_detail(value)
            parts.append(text if field == "non_field_errors" else f"{field}: {text}")
        return "; ".join(parts)
    if isinstance(detail, (list, tuple)):
        return " ".join(_flatten_detail(item) for item in detail)
    return str(detail)
