import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def booking_confirmation(reservation, quote, guest_name):
    subject = "Hotel Booking Confirmation"
    body = "\n".join([
        f"Dear {guest_name},",
        "",
        "Thank you for your booking! Here are your details:",
        "",
        f"Booking ID: {reservation.pk}",
        f"Hotel Name: {quote.hotel_name}",
        f"Location: {quote.hotel_address}",
        f"Check-in: {reservation.check_in:%a %b %d %Y}",
        f"Check-out: {reservation.check_out:%a %b %d %Y}",
        f"Guests: {reservation.guests}",
        f"Total Amount: {format_amount(reservation.total_cents)} {settings.PAYMENT_CURRENCY.upper()}",
        "",
        "We look forward to welcoming you!",
    ])
    return subject, body


def format_amount(cents):
    return f"{cents / 100:.2f}"


def send_notification(to_email, subject, body):
    """Deliver one email; never raises."""
    if not to_email:
        logger.info("No email on file, skipping notification %r", subject)
        return False
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [to_email])
    except Exception as e:
        logger.error("Failed to send email to %s: %s", to_email, e)
        return False
    logger.info("Email sent to %s: %s", to_email, subject)
    return True
