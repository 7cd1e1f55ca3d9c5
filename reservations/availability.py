from django.db.models import Exists, OuterRef

from .models import Room, Reservation


def overlaps(a_start, a_end, b_start, b_end):
    """Half-open intervals [a_start, a_end) and [b_start, b_end) share a day."""
    return a_start < b_end and b_start < a_end


def overlapping_reservations(room_id, check_in, check_out):
    return Reservation.objects.filter(
        room_id=room_id,
        status=Reservation.Status.CONFIRMED,
        check_in__lt=check_out,
        check_out__gt=check_in,
    )


def is_available(room_id, check_in, check_out):
    return not overlapping_reservations(room_id, check_in, check_out).exists()


def available_rooms_qs(check_in, check_out, max_price_cents=None, city=None):
    overlap = Exists(
        Reservation.objects.filter(
            room=OuterRef('pk'),
            status=Reservation.Status.CONFIRMED,
            check_in__lt=check_out,
            check_out__gt=check_in,
        )
    )
    qs = (
        Room.objects.select_related('hotel')
        .filter(is_available=True)
        .annotate(has_overlap=overlap)
        .filter(has_overlap=False)
    )
    if max_price_cents is not None:
        qs = qs.filter(price_cents__lte=max_price_cents)
    if city:
        qs = qs.filter(hotel__city__iexact=city)
    return qs.order_by('price_cents', 'pk')
