"""
Management command to audit the credit ledger.

Usage:
    python manage.py verify_ledger [--organization <uuid>]

Replays every member's credit transactions from zero and reports members
whose stored balance differs. Exits non-zero when a mismatch is found.
"""

from django.core.management.base import BaseCommand, CommandError

from apps.members.services import find_ledger_mismatches


class Command(BaseCommand):
    help = 'Verify that every member balance equals the sum of its credit transactions'

    def add_arguments(self, parser):
        parser.add_argument(
            '--organization',
            help='Only audit members of this organization ID',
        )

    def handle(self, *args, **options):
        mismatches = find_ledger_mismatches(organization_id=options.get('organization'))

        if not mismatches:
            self.stdout.write(self.style.SUCCESS('Ledger is consistent.'))
            return

        for member, replayed in mismatches:
            self.stdout.write(self.style.ERROR(
                f'Member {member.id}: stored {member.credit_balance}, ledger {replayed}'
            ))
        raise CommandError(f'{len(mismatches)} member(s) have inconsistent balances')
