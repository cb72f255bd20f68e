"""
Management command to load the countries and store locations the store starts with
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.catalog.models import Country, StoreLocation

OPENING_HOURS = "Пн — Пт: 10 — 18\nСб: 11 — 17\nВс: Выходной"

COUNTRIES = [
    ('Россия', 'RU'),
    ('Германия', 'DE'),
    ('Италия', 'IT'),
    ('Швейцария', 'CH'),
    ('Финляндия', 'FI'),
    ('Австрия', 'AT'),
    ('Португалия', 'PT'),
    ('Китай', 'CN'),
    ('Польша', 'PL'),
    ('Бельгия', 'BE'),
    ('Сербия', 'RS'),
    ('Голландия', 'NL'),
]

STORE_LOCATIONS = [
    {
        'address': 'ул. Русская, 78',
        'description': 'Вход со стороны дороги',
        'opening_hours': OPENING_HOURS,
    },
    {
        'address': 'ул. 100 летия, 30',
        'description': '',
        'opening_hours': OPENING_HOURS,
    },
]


class Command(BaseCommand):
    help = "Loads countries and store locations"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete existing store locations before loading',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write(self.style.WARNING("Clearing store locations..."))
            StoreLocation.objects.all().delete()

        created_countries = 0
        for name, code in COUNTRIES:
            _, created = Country.objects.get_or_create(
                code=code,
                defaults={'name': name, 'flag_image': f'country-flags/{code.lower()}.svg'},
            )
            created_countries += created

        created_locations = 0
        for location in STORE_LOCATIONS:
            _, created = StoreLocation.objects.get_or_create(
                address=location['address'],
                defaults=location,
            )
            created_locations += created

        self.stdout.write(self.style.SUCCESS(
            f"Countries: {created_countries} created, {len(COUNTRIES) - created_countries} existing"
        ))
        self.stdout.write(self.style.SUCCESS(
            f"Store locations: {created_locations} created, "
            f"{len(STORE_LOCATIONS) - created_locations} existing"
        ))
