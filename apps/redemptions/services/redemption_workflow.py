"""
Redemption workflow service.

Handles the lifecycle of package redemptions:

    create   -> PENDING (price, credits and windows computed and stored)
    approve  PENDING -> ACTIVE (credits posted, entitlements granted)
    cancel   PENDING -> CANCELLED
    use      ACTIVE  -> USED

Every transition is a conditional UPDATE filtered on the expected status, so
two concurrent approvals (or an approval racing a cancel) cannot both win.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.catalog.models import Coupon, CouponType, PackageType
from apps.catalog.services import (
    get_active_package,
    get_package,
    get_active_coupon,
    validate_coupon,
    check_redemption_limits,
)
from apps.members.models import MemberStatus, TransactionType
from apps.members.services import (
    get_member,
    lock_member,
    apply_to_locked_member,
    translate_contention,
    MemberInactiveError,
)
from apps.redemptions.models import PackageRedemption, RedemptionStatus, RedemptionType

from .exceptions import (
    RedemptionNotFoundError,
    PackageRequiredError,
    InvalidStateError,
)
from .pricing import quote

logger = logging.getLogger(__name__)


def _redemptions_of(organization_id: UUID) -> QuerySet[PackageRedemption]:
    return PackageRedemption.objects.filter(organization_id=organization_id)


def _transition(
    *,
    redemption_id: UUID,
    organization_id: UUID,
    from_status: str,
    to_status: str,
    **fields
) -> None:
    """
    Move a redemption from ``from_status`` to ``to_status`` atomically.

    Raises:
        RedemptionNotFoundError: If the redemption doesn't exist in this organization
        InvalidStateError: If the redemption is not in ``from_status``
    """
    try:
        redemptions = _redemptions_of(organization_id).filter(id=redemption_id)
        updated = redemptions.filter(status=from_status).update(
            status=to_status,
            updated_at=timezone.now(),
            **fields
        )
    except (ValidationError, ValueError):
        raise RedemptionNotFoundError(f"Redemption with ID {redemption_id} not found")

    if updated:
        return

    current = redemptions.values_list('status', flat=True).first()
    if current is None:
        raise RedemptionNotFoundError(f"Redemption with ID {redemption_id} not found")
    raise InvalidStateError(
        f"Redemption is {current}, expected {from_status}"
    )


def get_redemption(*, redemption_id: UUID, organization_id: UUID) -> PackageRedemption:
    """
    Get a redemption of the organization.

    Raises:
        RedemptionNotFoundError: If the redemption doesn't exist in this organization
    """
    try:
        return (
            _redemptions_of(organization_id)
            .select_related('member__user', 'package', 'coupon')
            .get(id=redemption_id)
        )
    except (PackageRedemption.DoesNotExist, ValidationError, ValueError):
        raise RedemptionNotFoundError(f"Redemption with ID {redemption_id} not found")


def list_redemptions(
    *,
    organization_id: UUID,
    member_id: Optional[UUID] = None,
    status: Optional[str] = None
) -> QuerySet[PackageRedemption]:
    """Redemptions of the organization, newest first."""
    redemptions = (
        _redemptions_of(organization_id)
        .select_related('member__user', 'package', 'coupon')
    )
    if member_id:
        redemptions = redemptions.filter(member_id=member_id)
    if status:
        redemptions = redemptions.filter(status=status)
    return redemptions.order_by('-redeemed_at')


def create_redemption(
    *,
    member_id: UUID,
    organization_id: UUID,
    redeemed_by: Optional[User] = None,
    package_id: Optional[UUID] = None,
    coupon_id: Optional[UUID] = None,
    coupon_code: Optional[str] = None,
    notes: str = '',
    now: Optional[datetime] = None
) -> PackageRedemption:
    """
    Create a PENDING redemption of a package, optionally through a coupon.

    Nothing is granted yet: the member's balance and entitlements only
    change on approval.

    Args:
        member_id: Member receiving the package
        organization_id: Caller's organization
        redeemed_by: Acting user
        package_id: Requested package (optional when a PACKAGE coupon names one)
        coupon_id: Coupon by ID
        coupon_code: Coupon by code (case-insensitive), takes precedence over coupon_id
        notes: Free-form note stored on the redemption
        now: Moment of the request (defaults to timezone.now())

    Returns:
        The created PackageRedemption

    Raises:
        MemberNotFoundError: If the member doesn't exist in this organization
        MemberInactiveError: If the member is not ACTIVE
        PackageNotFoundError: If the requested package is missing or inactive
        CouponNotFoundError, CouponInactiveError, CouponNotYetValidError,
        CouponExpiredError: If the coupon cannot be used
        RedemptionLimitReachedError, PerMemberLimitReachedError: If a cap is reached
        PackageRequiredError: If no package could be determined
    """
    now = now or timezone.now()

    member = get_member(member_id=member_id, organization_id=organization_id)
    if member.status != MemberStatus.ACTIVE:
        raise MemberInactiveError(f"Member {member.id} is not active")

    package = None
    if package_id:
        package = get_active_package(package_id=package_id, organization_id=organization_id)

    coupon = None
    redemption_type = RedemptionType.PACKAGE_DIRECT
    if coupon_code or coupon_id:
        coupon = get_active_coupon(
            organization_id=organization_id,
            coupon_id=coupon_id,
            coupon_code=coupon_code,
        )
        validate_coupon(coupon, now)
        check_redemption_limits(coupon, member.id)

        if coupon.coupon_type == CouponType.PACKAGE:
            if coupon.package_id:
                # Coupon packages may be retired from the public catalog
                package = get_package(package_id=coupon.package_id, organization_id=organization_id)
            redemption_type = RedemptionType.COUPON_PACKAGE
        elif coupon.coupon_type == CouponType.DISCOUNT:
            redemption_type = RedemptionType.COUPON_DISCOUNT
        elif coupon.coupon_type == CouponType.CREDIT_BONUS:
            redemption_type = RedemptionType.COUPON_BONUS

    if package is None:
        raise PackageRequiredError('Package is required')

    priced = quote(package, coupon, now=now, tz_name=member.organization.timezone)

    redemption = PackageRedemption.objects.create(
        organization_id=organization_id,
        member=member,
        package=package,
        coupon=coupon,
        redemption_type=redemption_type,
        status=RedemptionStatus.PENDING,
        package_name=package.name,
        package_type=package.type,
        original_price=priced.original_price,
        discount_amount=priced.discount_amount,
        final_price=priced.final_price,
        credits_added=priced.credits or None,
        all_access_days=priced.all_access_days,
        all_access_expires_at=priced.all_access_expires_at,
        friend_pass_available=priced.friend_pass_available,
        friend_pass_expires_at=priced.friend_pass_expires_at,
        notes=notes or '',
        redeemed_by=redeemed_by,
    )

    logger.info(
        'Redemption %s created for member %s: %s (%s), final price %s',
        redemption.id, member.id, package.code, redemption_type, priced.final_price,
    )
    return redemption


@translate_contention
@transaction.atomic
def approve_redemption(
    *,
    redemption_id: UUID,
    organization_id: UUID,
    approved_by: User,
    now: Optional[datetime] = None
) -> PackageRedemption:
    """
    Approve a PENDING redemption and grant what it computed at creation.

    In one transaction: flip the status to ACTIVE, re-check the coupon caps
    with the coupon row locked, post the credits to the ledger and set the
    member's entitlement flags. Any failure rolls everything back.

    Returns:
        The approved PackageRedemption

    Raises:
        RedemptionNotFoundError: If the redemption doesn't exist in this organization
        InvalidStateError: If the redemption is not PENDING
        RedemptionLimitReachedError, PerMemberLimitReachedError: If approving
            would overshoot a coupon cap
        LedgerContentionError: On lock timeout / deadlock (retry the call)
    """
    now = now or timezone.now()

    _transition(
        redemption_id=redemption_id,
        organization_id=organization_id,
        from_status=RedemptionStatus.PENDING,
        to_status=RedemptionStatus.ACTIVE,
        approved_by=approved_by,
        approved_at=now,
    )
    redemption = get_redemption(redemption_id=redemption_id, organization_id=organization_id)

    if redemption.coupon_id:
        coupon = Coupon.objects.select_for_update().get(id=redemption.coupon_id)
        check_redemption_limits(coupon, redemption.member_id, exclude_redemption_id=redemption.id)

    member = lock_member(member_id=redemption.member_id, organization_id=organization_id)

    if redemption.credits_added:
        apply_to_locked_member(
            member,
            amount=redemption.credits_added,
            type=TransactionType.REDEMPTION_CREDIT,
            description=f"Package redemption approved: {redemption.package_name}",
            performed_by=approved_by,
        )

    entitlement_fields = []
    if redemption.all_access_expires_at:
        member.has_all_access = True
        member.all_access_expires_at = redemption.all_access_expires_at
        entitlement_fields += ['has_all_access', 'all_access_expires_at']
    if redemption.package_type == PackageType.ELITE_30:
        member.is_elite_member = True
        entitlement_fields.append('is_elite_member')
    if entitlement_fields:
        member.save(update_fields=entitlement_fields + ['updated_at'])

    logger.info(
        'Redemption %s approved by %s: %s credits, all-access until %s',
        redemption.id, approved_by.id, redemption.credits_added or 0,
        redemption.all_access_expires_at,
    )
    redemption.member = member
    return redemption


@translate_contention
@transaction.atomic
def cancel_redemption(
    *,
    redemption_id: UUID,
    organization_id: UUID,
    cancelled_by: Optional[User] = None
) -> PackageRedemption:
    """
    Cancel (reject) a PENDING redemption. ACTIVE redemptions stay ACTIVE;
    reversing granted credits takes an explicit ledger deduction.

    Raises:
        RedemptionNotFoundError: If the redemption doesn't exist in this organization
        InvalidStateError: If the redemption is not PENDING
    """
    _transition(
        redemption_id=redemption_id,
        organization_id=organization_id,
        from_status=RedemptionStatus.PENDING,
        to_status=RedemptionStatus.CANCELLED,
        cancelled_by=cancelled_by,
        cancelled_at=timezone.now(),
    )
    logger.info(
        'Redemption %s cancelled by %s',
        redemption_id, cancelled_by.id if cancelled_by else 'system',
    )
    return get_redemption(redemption_id=redemption_id, organization_id=organization_id)


@translate_contention
@transaction.atomic
def mark_redemption_used(*, redemption_id: UUID, organization_id: UUID) -> PackageRedemption:
    """
    Mark an ACTIVE redemption as fully consumed.

    Raises:
        RedemptionNotFoundError: If the redemption doesn't exist in this organization
        InvalidStateError: If the redemption is not ACTIVE
    """
    _transition(
        redemption_id=redemption_id,
        organization_id=organization_id,
        from_status=RedemptionStatus.ACTIVE,
        to_status=RedemptionStatus.USED,
    )
    logger.info('Redemption %s marked as used', redemption_id)
    return get_redemption(redemption_id=redemption_id, organization_id=organization_id)
