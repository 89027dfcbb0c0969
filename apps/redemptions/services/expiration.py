"""
All-Access expiry sweep.

Run periodically (``manage.py expire_redemptions``). Moves ACTIVE
All-Access redemptions whose window has passed to EXPIRED and brings the
member's ``has_all_access`` flag in line with what is still active.
"""

import logging
from datetime import datetime
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.members.models import Member
from apps.members.services import translate_contention
from apps.redemptions.models import PackageRedemption, RedemptionStatus

logger = logging.getLogger(__name__)


@translate_contention
@transaction.atomic
def expire_redemptions(*, now: Optional[datetime] = None) -> int:
    """
    Expire every All-Access redemption whose window ended before ``now``.

    Returns:
        Number of redemptions moved to EXPIRED
    """
    now = now or timezone.now()

    due = list(
        PackageRedemption.objects
        .select_for_update()
        .filter(
            status=RedemptionStatus.ACTIVE,
            all_access_expires_at__isnull=False,
            all_access_expires_at__lt=now,
        )
        .values_list('id', 'member_id')
    )
    if not due:
        return 0

    expired = PackageRedemption.objects.filter(
        id__in=[redemption_id for redemption_id, _ in due],
        status=RedemptionStatus.ACTIVE,
    ).update(status=RedemptionStatus.EXPIRED, updated_at=now)

    for member in Member.objects.select_for_update().filter(id__in={member_id for _, member_id in due}):
        latest = (
            PackageRedemption.objects
            .filter(
                member_id=member.id,
                status=RedemptionStatus.ACTIVE,
                all_access_expires_at__gte=now,
            )
            .order_by('-all_access_expires_at')
            .values_list('all_access_expires_at', flat=True)
            .first()
        )
        member.has_all_access = latest is not None
        if latest is not None:
            member.all_access_expires_at = latest
        member.save(update_fields=['has_all_access', 'all_access_expires_at', 'updated_at'])

    logger.info('Expired %d All-Access redemption(s)', expired)
    return expired
