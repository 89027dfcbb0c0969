"""
All-Access daily usage tracker.

An ACTIVE All-Access redemption lets its member book one session per
organization-local calendar day without spending credits. The unique
constraint on (package_redemption, usage_date) is the authoritative guard;
the status and window checks here only produce clearer errors.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from apps.members.services import translate_contention
from apps.redemptions.models import AllAccessDailyUsage, PackageRedemption, RedemptionStatus

from .exceptions import (
    DayAlreadyUsedError,
    EntitlementExpiredError,
    EntitlementNotStartedError,
    RedemptionNotActiveError,
)
from .redemption_workflow import get_redemption

logger = logging.getLogger(__name__)


def local_expiry_date(redemption: PackageRedemption) -> date:
    """Last organization-local day covered by an All-Access redemption."""
    tz = ZoneInfo(redemption.organization.timezone)
    return redemption.all_access_expires_at.astimezone(tz).date()


def local_start_date(redemption: PackageRedemption) -> date:
    """First organization-local day covered: the day of approval."""
    tz = ZoneInfo(redemption.organization.timezone)
    return redemption.approved_at.astimezone(tz).date()


@translate_contention
def record_daily_usage(
    *,
    redemption_id: UUID,
    organization_id: UUID,
    booking_id: UUID,
    usage_date: date
) -> AllAccessDailyUsage:
    """
    Consume the All-Access day ``usage_date`` for a booking.

    No-shows still burn the day; only a booking cancellation releases it
    (see ``release_daily_usage``).

    Raises:
        RedemptionNotFoundError: If the redemption doesn't exist in this organization
        RedemptionNotActiveError: If it is not an ACTIVE All-Access redemption
        EntitlementExpiredError: If ``usage_date`` is after the window or the
            sweep has already expired the redemption
        EntitlementNotStartedError: If ``usage_date`` is before the approval day
        DayAlreadyUsedError: If the day has already been consumed
        LedgerContentionError: On lock timeout (retry the call)
    """
    redemption = get_redemption(redemption_id=redemption_id, organization_id=organization_id)

    if redemption.is_all_access and redemption.status == RedemptionStatus.EXPIRED:
        raise EntitlementExpiredError(
            f"All-Access window ended on {local_expiry_date(redemption).isoformat()}"
        )
    if redemption.status != RedemptionStatus.ACTIVE or not redemption.is_all_access:
        raise RedemptionNotActiveError(
            f"Redemption {redemption.id} is not an active All-Access redemption"
        )
    if usage_date > local_expiry_date(redemption):
        raise EntitlementExpiredError(
            f"All-Access window ended on {local_expiry_date(redemption).isoformat()}"
        )
    if usage_date < local_start_date(redemption):
        raise EntitlementNotStartedError(
            f"All-Access window starts on {local_start_date(redemption).isoformat()}"
        )

    try:
        with transaction.atomic():
            usage = AllAccessDailyUsage.objects.create(
                package_redemption=redemption,
                usage_date=usage_date,
                booking_id=booking_id,
            )
    except IntegrityError:
        raise DayAlreadyUsedError(
            f"All-Access already used on {usage_date.isoformat()}"
        )

    logger.info(
        'All-Access day %s used by member %s (redemption %s, booking %s)',
        usage_date, redemption.member_id, redemption.id, booking_id,
    )
    return usage


def release_daily_usage(*, redemption_id: UUID, organization_id: UUID, booking_id: UUID) -> bool:
    """
    Free the day consumed by a cancelled booking.

    Returns:
        True if a usage row was removed

    Raises:
        RedemptionNotFoundError: If the redemption doesn't exist in this organization
    """
    redemption = get_redemption(redemption_id=redemption_id, organization_id=organization_id)
    try:
        deleted, _ = AllAccessDailyUsage.objects.filter(
            package_redemption=redemption,
            booking_id=booking_id,
        ).delete()
    except (ValidationError, ValueError):
        return False

    if deleted:
        logger.info('All-Access usage for booking %s released', booking_id)
    return bool(deleted)


def list_daily_usage(*, redemption_id: UUID, organization_id: UUID) -> QuerySet[AllAccessDailyUsage]:
    """
    Days consumed from a redemption, newest first.

    Raises:
        RedemptionNotFoundError: If the redemption doesn't exist in this organization
    """
    redemption = get_redemption(redemption_id=redemption_id, organization_id=organization_id)
    return redemption.daily_usages.order_by('-usage_date')


def can_book_without_credits(
    *,
    member_id: UUID,
    organization_id: UUID,
    on_date: date
) -> Optional[PackageRedemption]:
    """
    Find the All-Access redemption that would cover a booking on ``on_date``.

    Returns:
        An ACTIVE All-Access redemption whose window includes ``on_date``
        and whose day is still unused, or None if the member must pay credits
    """
    candidates = (
        PackageRedemption.objects
        .filter(
            member_id=member_id,
            organization_id=organization_id,
            status=RedemptionStatus.ACTIVE,
            all_access_expires_at__isnull=False,
        )
        .exclude(daily_usages__usage_date=on_date)
        .select_related('organization')
        .order_by('all_access_expires_at')
    )
    for redemption in candidates:
        if local_start_date(redemption) <= on_date <= local_expiry_date(redemption):
            return redemption
    return None
