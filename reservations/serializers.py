from rest_framework import serializers

from .models import Hotel, Room, Reservation


class HotelSerializer(serializers.ModelSerializer):

    class Meta:
        model = Hotel
        fields = ['id', 'name', 'address', 'city']


class RoomSerializer(serializers.ModelSerializer):
    hotel = HotelSerializer(read_only=True)

    class Meta:
        model = Room
        fields = ['id', 'hotel', 'number', 'room_type', 'price_cents', 'capacity', 'description']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['price_dollar'] = instance.price_cents / 100.0
        return data


class ReservationSerializer(serializers.ModelSerializer):
    room = RoomSerializer(read_only=True)
    hotel = HotelSerializer(read_only=True)

    class Meta:
        model = Reservation
        fields = [
            'id', 'user_id', 'room', 'hotel', 'check_in', 'check_out', 'guests',
            'total_cents', 'payment_status', 'status', 'created_at',
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['nights'] = instance.nights
        data['total_dollar'] = instance.total_cents / 100.0
        data['is_paid'] = instance.payment_status == 'PAID'
        return data


class StayInput(serializers.Serializer):
    room = serializers.IntegerField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()

    def validate(self, data):
        if data['check_out'] <= data['check_in']:
            raise serializers.ValidationError("check_out must be after check_in")
        return data


class BookingInput(StayInput):
    # Guest count is checked by the booking service.
    guests = serializers.IntegerField()


class RoomSearchInput(serializers.Serializer):
    check_in = serializers.DateField(required=False)
    check_out = serializers.DateField(required=False)
    max_price = serializers.IntegerField(required=False, min_value=0)  # whole currency units
    city = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        if ('check_in' in data) != ('check_out' in data):
            raise serializers.ValidationError("check_in and check_out must be given together")
        if 'check_in' in data and data['check_out'] <= data['check_in']:
            raise serializers.ValidationError("check_out must be after check_in")
        return data


class PaymentInput(serializers.Serializer):
    booking_id = serializers.UUIDField()
