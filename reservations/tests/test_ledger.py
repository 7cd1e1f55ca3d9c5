import uuid

from django.test import TestCase

from reservations import ledger
from reservations.booking import create_booking
from reservations.errors import Conflict, ReservationNotFound
from reservations.models import Reservation, PaymentStatus

from .helpers import d, guest, make_room


class LedgerLookupTestCase(TestCase):

    def setUp(self):
        self.room = make_room(price_cents=1000)
        self.first = create_booking(guest('user_1'), self.room.id, d('2024-06-01'), d('2024-06-02'), 1)
        self.second = create_booking(guest('user_1'), self.room.id, d('2024-06-05'), d('2024-06-07'), 1)
        self.other = create_booking(guest('user_2'), self.room.id, d('2024-06-10'), d('2024-06-11'), 1)

    def test_find_by_id(self):
        self.assertEqual(ledger.find_by_id(self.first.pk), self.first)
        self.assertEqual(ledger.find_by_id(str(self.first.pk)), self.first)

    def test_find_by_id_unknown_or_malformed(self):
        for value in (uuid.uuid4(), 'not-a-uuid', None):
            with self.subTest(value=value):
                with self.assertRaises(ReservationNotFound):
                    ledger.find_by_id(value)

    def test_list_by_user_most_recent_first(self):
        self.assertEqual(list(ledger.list_by_user('user_1')), [self.second, self.first])
        self.assertEqual(list(ledger.list_by_user('nobody')), [])

    def test_list_by_hotel_and_summary(self):
        bookings = list(ledger.list_by_hotel(self.room.hotel_id))
        self.assertEqual(bookings, [self.other, self.second, self.first])

        total_bookings, total_revenue = ledger.hotel_summary(self.room.hotel_id)
        self.assertEqual(total_bookings, 3)
        self.assertEqual(total_revenue, 1000 + 2000 + 1000)

    def test_summary_for_hotel_without_bookings(self):
        empty = make_room(number='202')
        self.assertEqual(ledger.hotel_summary(empty.hotel_id), (0, 0))


class PaymentStatusTransitionTestCase(TestCase):
    """Compare-and-set payment transitions"""

    def setUp(self):
        room = make_room(price_cents=1000)
        self.reservation = create_booking(guest(), room.id, d('2024-06-01'), d('2024-06-03'), 1)

    def _status(self):
        return Reservation.objects.get(pk=self.reservation.pk).payment_status

    def test_forward_path(self):
        ledger.update_payment_status(self.reservation.pk, PaymentStatus.UNPAID, PaymentStatus.PENDING)
        updated = ledger.update_payment_status(self.reservation.pk, PaymentStatus.PENDING, PaymentStatus.PAID)
        self.assertEqual(updated.payment_status, PaymentStatus.PAID)
        self.assertEqual(self._status(), PaymentStatus.PAID)

    def test_reapplying_the_same_transition_is_a_no_op(self):
        ledger.update_payment_status(self.reservation.pk, PaymentStatus.UNPAID, PaymentStatus.PENDING)
        ledger.update_payment_status(self.reservation.pk, PaymentStatus.PENDING, PaymentStatus.PAID)

        again = ledger.update_payment_status(self.reservation.pk, PaymentStatus.PENDING, PaymentStatus.PAID)
        self.assertEqual(again.payment_status, PaymentStatus.PAID)

    def test_stale_precondition_conflicts_without_writing(self):
        ledger.update_payment_status(self.reservation.pk, PaymentStatus.UNPAID, PaymentStatus.PENDING)
        ledger.update_payment_status(self.reservation.pk, PaymentStatus.PENDING, PaymentStatus.PAID)

        with self.assertRaises(Conflict):
            ledger.update_payment_status(self.reservation.pk, PaymentStatus.PENDING, PaymentStatus.FAILED)
        self.assertEqual(self._status(), PaymentStatus.PAID)

    def test_late_success_settles_a_failed_payment(self):
        ledger.update_payment_status(self.reservation.pk, PaymentStatus.UNPAID, PaymentStatus.PENDING)
        ledger.update_payment_status(self.reservation.pk, PaymentStatus.PENDING, PaymentStatus.FAILED)

        updated = ledger.update_payment_status(self.reservation.pk, PaymentStatus.FAILED, PaymentStatus.PAID)
        self.assertEqual(updated.payment_status, PaymentStatus.PAID)

    def test_expected_status_must_match(self):
        with self.assertRaises(Conflict):
            ledger.update_payment_status(self.reservation.pk, PaymentStatus.PENDING, PaymentStatus.PAID)
        self.assertEqual(self._status(), PaymentStatus.UNPAID)

    def test_illegal_moves_are_refused(self):
        illegal = [
            (PaymentStatus.UNPAID, PaymentStatus.PAID),
            (PaymentStatus.PAID, PaymentStatus.PENDING),
            (PaymentStatus.PAID, PaymentStatus.FAILED),
        ]
        for expected, target in illegal:
            with self.subTest(move=(expected, target)):
                with self.assertRaises(Conflict):
                    ledger.update_payment_status(self.reservation.pk, expected, target)
        self.assertEqual(self._status(), PaymentStatus.UNPAID)

    def test_unknown_reservation(self):
        with self.assertRaises(ReservationNotFound):
            ledger.update_payment_status(uuid.uuid4(), PaymentStatus.UNPAID, PaymentStatus.PENDING)

    def test_session_only_attaches_while_pending(self):
        self.assertFalse(ledger.attach_payment_session(self.reservation.pk, 'cs_1'))
        ledger.update_payment_status(self.reservation.pk, PaymentStatus.UNPAID, PaymentStatus.PENDING)
        self.assertTrue(ledger.attach_payment_session(self.reservation.pk, 'cs_1'))
        self.assertEqual(Reservation.objects.get(pk=self.reservation.pk).payment_session_id, 'cs_1')
