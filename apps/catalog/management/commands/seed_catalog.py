"""
Management command to seed the standard studio packages.

Usage:
    python manage.py seed_catalog --organization ride-studio
    python manage.py seed_catalog --organization ride-studio --deactivate-missing

Existing packages are matched by code and updated in place, so running the
command twice is safe.
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.accounts.models import Organization
from apps.catalog.models import Package, PackageType, FRIEND_PASS_BENEFIT


STANDARD_PACKAGES = [
    {
        'code': 'SINGLE-RIDE',
        'name': 'Single Ride',
        'description': 'One class credit.',
        'type': PackageType.SINGLE_RIDE,
        'price': Decimal('1500.00'),
        'credits': 1,
        'display_order': 1,
    },
    {
        'code': 'EXPLORER-5',
        'name': 'Explorer 5',
        'description': 'Five class credits.',
        'type': PackageType.CREDIT_PACK,
        'price': Decimal('5000.00'),
        'credits': 5,
        'display_order': 2,
    },
    {
        'code': 'CORE-10',
        'name': 'Core 10',
        'description': 'Ten class credits.',
        'type': PackageType.CREDIT_PACK,
        'price': Decimal('8000.00'),
        'credits': 10,
        'display_order': 3,
    },
    {
        'code': 'ELITE-20',
        'name': 'Elite 20',
        'description': 'Twenty class credits.',
        'type': PackageType.CREDIT_PACK,
        'price': Decimal('14000.00'),
        'credits': 20,
        'display_order': 4,
    },
    {
        'code': 'ELITE-30',
        'name': 'Elite 30',
        'description': 'Thirty class credits with elite member benefits.',
        'type': PackageType.ELITE_30,
        'price': Decimal('18000.00'),
        'credits': 30,
        'validity_days': 30,
        'benefits': [FRIEND_PASS_BENEFIT, 'priority_booking', 'elite_badge'],
        'display_order': 5,
    },
    {
        'code': 'ALL-ACCESS-30',
        'name': 'All Access 30',
        'description': 'One class per day for 30 days.',
        'type': PackageType.ALL_ACCESS,
        'price': Decimal('21000.00'),
        'credits': None,
        'validity_days': 30,
        'display_order': 6,
    },
]


class Command(BaseCommand):
    help = 'Create or update the standard packages of an organization'

    def add_arguments(self, parser):
        parser.add_argument(
            '--organization',
            required=True,
            help='Slug or ID of the organization to seed'
        )
        parser.add_argument(
            '--deactivate-missing',
            action='store_true',
            help='Deactivate packages whose code is not in the standard set'
        )

    @transaction.atomic
    def handle(self, *args, **options):
        organization = self._get_organization(options['organization'])

        created_count = 0
        for definition in STANDARD_PACKAGES:
            defaults = {
                'benefits': [],
                'validity_days': None,
                'is_active': True,
                **{key: value for key, value in definition.items() if key != 'code'},
            }
            package, created = Package.objects.update_or_create(
                organization=organization,
                code=definition['code'],
                defaults=defaults,
            )
            if created:
                created_count += 1
            self.stdout.write(f"  {'+' if created else '~'} {package.code}: {package.name}")

        if options['deactivate_missing']:
            codes = [definition['code'] for definition in STANDARD_PACKAGES]
            deactivated = (
                Package.objects
                .filter(organization=organization, is_active=True)
                .exclude(code__in=codes)
                .update(is_active=False)
            )
            self.stdout.write(f'  Deactivated {deactivated} other package(s)')

        self.stdout.write(self.style.SUCCESS(
            f'Seeded {len(STANDARD_PACKAGES)} packages for {organization.name} '
            f'({created_count} new)'
        ))

    def _get_organization(self, identifier):
        organization = Organization.objects.filter(slug=identifier).first()
        if organization is None:
            try:
                organization = Organization.objects.filter(id=identifier).first()
            except ValidationError:
                organization = None
        if organization is None:
            raise CommandError(f'Organization "{identifier}" does not exist')
        return organization
