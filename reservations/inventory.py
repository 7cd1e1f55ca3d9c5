from dataclasses import dataclass

from .errors import RoomNotFound
from .models import Room


@dataclass(frozen=True)
class RoomQuote:
    room_id: int
    nightly_rate_cents: int
    hotel_id: int
    hotel_name: str
    hotel_address: str


def resolve(room_id):
    """Read the room's nightly rate and owning hotel from inventory."""
    try:
        room = Room.objects.select_related("hotel").get(pk=room_id)
    except (Room.DoesNotExist, ValueError, TypeError):
        raise RoomNotFound(f"Room {room_id} not found.")
    return RoomQuote(
        room_id=room.pk,
        nightly_rate_cents=room.price_cents,
        hotel_id=room.hotel_id,
        hotel_name=room.hotel.name,
        hotel_address=room.hotel.address,
    )
