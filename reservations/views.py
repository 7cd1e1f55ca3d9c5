from django.http import JsonResponse
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from . import ledger
from .availability import available_rooms_qs, is_available
from .booking import create_booking
from .errors import HotelNotFound, ReservationNotFound, RoomNotFound
from .models import Hotel, Room
from .payments import PaymentReconciler
from .serializers import (
    BookingInput,
    PaymentInput,
    ReservationSerializer,
    RoomSearchInput,
    RoomSerializer,
    StayInput,
)


def welcome(request):
    return JsonResponse({"message": "Welcome to the Hotel Reservation System"})


def health_check(request):
    return JsonResponse({"status": "ok"})


def get_reconciler():
    return PaymentReconciler()


class RoomViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Room.objects.select_related('hotel').filter(is_available=True)
    serializer_class = RoomSerializer
    permission_classes = [AllowAny]

    def list(self, request):
        """Search available rooms with filters"""
        params = RoomSearchInput(data=request.query_params)
        params.is_valid(raise_exception=True)
        filters = params.validated_data

        max_price = filters.get('max_price')
        max_price_cents = max_price * 100 if max_price is not None else None

        if 'check_in' in filters:
            rooms = available_rooms_qs(filters['check_in'], filters['check_out'],
                                       max_price_cents, filters.get('city'))
        else:
            # Return all listed rooms if no dates specified
            rooms = self.get_queryset()
            if max_price_cents is not None:
                rooms = rooms.filter(price_cents__lte=max_price_cents)
            if filters.get('city'):
                rooms = rooms.filter(hotel__city__iexact=filters['city'])

        serializer = self.get_serializer(rooms, many=True)
        return Response({'success': True, 'rooms': serializer.data})

    def retrieve(self, request, pk=None):
        room = Room.objects.select_related('hotel').filter(pk=pk).first() if str(pk).isdigit() else None
        if room is None:
            raise RoomNotFound(f"Room {pk} not found.")
        return Response({'success': True, 'room': self.get_serializer(room).data})


class BookingViewSet(viewsets.GenericViewSet):
    serializer_class = ReservationSerializer

    def get_queryset(self):
        return ledger.list_by_user(self.request.user.id)

    def create(self, request):
        """Reserve a room for the authenticated user"""
        data = BookingInput(data=request.data)
        data.is_valid(raise_exception=True)
        params = data.validated_data

        reservation = create_booking(
            request.user,
            room_id=params['room'],
            check_in=params['check_in'],
            check_out=params['check_out'],
            guests=params['guests'],
        )
        return Response({
            'success': True,
            'message': 'Booking created successfully',
            'booking': self.get_serializer(reservation).data,
        }, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        reservation = ledger.find_by_id(pk)
        if reservation.user_id != request.user.id:
            raise ReservationNotFound(f"Booking {pk} not found.")
        return Response({'success': True, 'booking': self.get_serializer(reservation).data})

    @action(detail=False, methods=['post'], url_path='check-availability', permission_classes=[AllowAny])
    def check_availability(self, request):
        data = StayInput(data=request.data)
        data.is_valid(raise_exception=True)
        params = data.validated_data
        if not Room.objects.filter(pk=params['room']).exists():
            return Response({'success': True, 'is_available': False})
        available = is_available(params['room'], params['check_in'], params['check_out'])
        return Response({'success': True, 'is_available': available})

    @action(detail=False, methods=['get'])
    def user(self, request):
        """Get the caller's bookings, most recent first"""
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response({'success': True, 'bookings': serializer.data})

    @action(detail=False, methods=['get'])
    def hotel(self, request):
        """Dashboard for the hotel owned by the caller"""
        hotel = Hotel.objects.filter(owner_id=request.user.id).order_by('pk').first()
        if hotel is None:
            raise HotelNotFound()

        bookings = ledger.list_by_hotel(hotel.pk)
        total_bookings, total_revenue = ledger.hotel_summary(hotel.pk)
        return Response({
            'success': True,
            'dashboard': {
                'total_bookings': total_bookings,
                'total_revenue': total_revenue,
                'total_revenue_dollar': total_revenue / 100.0,
                'bookings': self.get_serializer(bookings, many=True).data,
            },
        })

    @action(detail=False, methods=['post'])
    def payment(self, request):
        """Start a hosted checkout for one of the caller's bookings"""
        data = PaymentInput(data=request.data)
        data.is_valid(raise_exception=True)

        session = get_reconciler().begin_payment(
            data.validated_data['booking_id'],
            user=request.user,
            origin=request.headers.get('Origin'),
        )
        return Response({'success': True, 'url': session.url})


class PaymentWebhookView(APIView):
    """Provider callback; authenticated by signature, not by user."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        reservation = get_reconciler().handle_webhook(
            request.body, request.headers.get('Stripe-Signature', '')
        )
        payload = {'success': True, 'received': True}
        if reservation is not None:
            payload['booking_id'] = str(reservation.pk)
            payload['payment_status'] = reservation.payment_status
        return Response(payload)
