"""
Management command to provision a studio organization.

Usage:
    python manage.py provision_organization --name "Ride Studio" --slug ride-studio \
        --timezone Europe/Istanbul --admin-email admin@ride.studio --admin-password ...

Organizations are created explicitly, once, as a deployment step. Request
handlers never create a fallback organization on their own.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.accounts.models import Organization, User, UserRole


class Command(BaseCommand):
    help = 'Create (or update) an organization and optionally its first admin user'

    def add_arguments(self, parser):
        parser.add_argument('--name', required=True, help='Display name of the organization')
        parser.add_argument('--slug', required=True, help='Unique slug of the organization')
        parser.add_argument('--timezone', default='UTC', help='IANA timezone, e.g. Europe/Istanbul')
        parser.add_argument('--admin-email', help='Email of the tenant admin to create or attach')
        parser.add_argument('--admin-password', help='Password for a newly created admin')

    @transaction.atomic
    def handle(self, *args, **options):
        try:
            ZoneInfo(options['timezone'])
        except (ZoneInfoNotFoundError, ValueError):
            raise CommandError(f"Unknown timezone: {options['timezone']}")

        organization, created = Organization.objects.update_or_create(
            slug=options['slug'],
            defaults={
                'name': options['name'],
                'timezone': options['timezone'],
            },
        )
        verb = 'Created' if created else 'Updated'
        self.stdout.write(self.style.SUCCESS(f'{verb} organization {organization.name} ({organization.id})'))

        admin_email = options.get('admin_email')
        if not admin_email:
            return

        user = User.objects.filter(email__iexact=admin_email).first()
        if user is None:
            if not options.get('admin_password'):
                raise CommandError('--admin-password is required to create a new admin user')
            user = User.objects.create_user(
                email=admin_email,
                password=options['admin_password'],
                organization=organization,
                role=UserRole.TENANT_ADMIN,
            )
            self.stdout.write(self.style.SUCCESS(f'Created tenant admin {user.email}'))
        else:
            if user.organization_id and user.organization_id != organization.id:
                raise CommandError(f'{user.email} already belongs to another organization')
            user.organization = organization
            user.role = UserRole.TENANT_ADMIN
            user.save(update_fields=['organization', 'role'])
            self.stdout.write(self.style.SUCCESS(f'Attached {user.email} as tenant admin'))
