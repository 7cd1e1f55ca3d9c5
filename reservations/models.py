import uuid

from django.db import models
from django.core.validators import MinValueValidator


class Hotel(models.Model):
    name = models.CharField(max_length=150)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100, blank=True)
    owner_id = models.CharField(max_length=64, db_index=True)  # identity provider user id

    def __str__(self):
        return self.name


class Room(models.Model):
    hotel = models.ForeignKey(Hotel, on_delete=models.PROTECT, related_name="rooms")
    number = models.CharField(max_length=20)
    room_type = models.CharField(max_length=50, blank=True)
    price_cents = models.PositiveIntegerField(validators=[MinValueValidator(1)])  # per night
    capacity = models.PositiveIntegerField(default=1)
    description = models.TextField(blank=True)
    is_available = models.BooleanField(default=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["hotel", "number"], name="unique_room_number_per_hotel"),
        ]

    def __str__(self):
        return f"{self.hotel.name} #{self.number}"


class PaymentStatus(models.TextChoices):
    UNPAID = "UNPAID"
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


# Allowed forward moves; PAID is terminal.
PAYMENT_TRANSITIONS = {
    PaymentStatus.UNPAID: {PaymentStatus.PENDING},
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    # A late success after a failure still settles.
    PaymentStatus.FAILED: {PaymentStatus.PENDING, PaymentStatus.PAID},
    PaymentStatus.PAID: set(),
}


class Reservation(models.Model):
    class Status(models.TextChoices):
        CONFIRMED = "CONFIRMED"
        CANCELLED = "CANCELLED"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=64, db_index=True)
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name="reservations")
    # Copied from room.hotel when the reservation is written, never re-synced.
    hotel = models.ForeignKey(Hotel, on_delete=models.PROTECT, related_name="reservations")
    check_in = models.DateField()
    check_out = models.DateField()  # exclusive
    guests = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    total_cents = models.PositiveIntegerField()
    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)
    payment_session_id = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.CONFIRMED)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_in__lt=models.F("check_out")),
                name="reservation_check_in_before_check_out",
            ),
        ]

    @property
    def nights(self):
        return (self.check_out - self.check_in).days

    def __str__(self):
        return f"{self.id} {self.room_id} {self.check_in}..{self.check_out}"


class RoomNight(models.Model):
    """One occupied night of a confirmed reservation.

    The unique (room, night) pair is the storage-level guard against double
    booking: two transactions claiming the same night cannot both commit.
    Cancelling a reservation releases its nights by deleting these rows.
    """

    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name="occupied_nights")
    reservation = models.ForeignKey(Reservation, on_delete=models.CASCADE, related_name="nights_claimed")
    night = models.DateField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["room", "night"], name="unique_room_night"),
        ]
