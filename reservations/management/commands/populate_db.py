from django.core.management.base import BaseCommand

from reservations.models import Hotel, Room


HOTELS = [
    {
        'name': 'Seaside Residency',
        'address': '12 Marine Drive',
        'city': 'Mumbai',
        'rooms': [
            {'number': '101', 'room_type': 'Single Bed', 'price_cents': 250000, 'capacity': 1,
             'description': 'Compact single room with city view'},
            {'number': '102', 'room_type': 'Double Bed', 'price_cents': 400000, 'capacity': 2,
             'description': 'Double room with balcony'},
            {'number': '201', 'room_type': 'Luxury Room', 'price_cents': 750000, 'capacity': 3,
             'description': 'Spacious luxury room with ocean view'},
        ],
    },
    {
        'name': 'Hillcrest Lodge',
        'address': '4 Mall Road',
        'city': 'Shimla',
        'rooms': [
            {'number': '1', 'room_type': 'Double Bed', 'price_cents': 320000, 'capacity': 2,
             'description': 'Mountain view double room'},
            {'number': '2', 'room_type': 'Family Suite', 'price_cents': 900000, 'capacity': 4,
             'description': 'Family suite with fireplace'},
        ],
    },
]


class Command(BaseCommand):
    help = 'Populate database with sample hotels and rooms'

    def add_arguments(self, parser):
        parser.add_argument('--owner', default='owner_demo',
                            help='Identity-provider user id that owns the sample hotels')

    def handle(self, *args, **options):
        for hotel_data in HOTELS:
            rooms_data = hotel_data['rooms']
            hotel, created = Hotel.objects.get_or_create(
                name=hotel_data['name'],
                defaults={
                    'address': hotel_data['address'],
                    'city': hotel_data['city'],
                    'owner_id': options['owner'],
                },
            )
            self.stdout.write(f"{'Created' if created else 'Found'} hotel: {hotel.name}")

            for room_data in rooms_data:
                room, created = Room.objects.get_or_create(
                    hotel=hotel,
                    number=room_data['number'],
                    defaults=room_data,
                )
                if created:
                    self.stdout.write(f'Created room: {room.number} - {room.room_type}')
                else:
                    self.stdout.write(f'Room {room.number} already exists')

        self.stdout.write(
            self.style.SUCCESS('Successfully populated database with sample data')
        )
