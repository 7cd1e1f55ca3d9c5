from django.urls import path
from rest_framework.routers import DefaultRouter

from reservations.views import RoomViewSet, BookingViewSet, PaymentWebhookView

router = DefaultRouter()
router.register(r'rooms', RoomViewSet)
router.register(r'bookings', BookingViewSet, basename='booking')

urlpatterns = router.urls + [
    path('payments/webhook/', PaymentWebhookView.as_view(), name='payment-webhook'),
]
