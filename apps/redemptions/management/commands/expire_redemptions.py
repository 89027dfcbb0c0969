"""
Management command to expire finished All-Access windows.

Usage:
    python manage.py expire_redemptions

Schedule it (cron, Render cron job) to run at least daily.
"""

from django.core.management.base import BaseCommand, CommandError

from apps.members.services import with_contention_retry, LedgerContentionError
from apps.redemptions.services import expire_redemptions


class Command(BaseCommand):
    help = 'Mark ACTIVE All-Access redemptions past their window as EXPIRED'

    def handle(self, *args, **options):
        try:
            expired = with_contention_retry(expire_redemptions)
        except LedgerContentionError as e:
            raise CommandError(str(e))
        self.stdout.write(self.style.SUCCESS(f'Expired {expired} redemption(s)'))
