"""
Coupon validation service.

Validity is checked when a redemption is created. Redemption caps count
ACTIVE redemptions only, so they are checked at creation and re-checked
inside the approval transaction.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.catalog.models import Coupon
from apps.redemptions.models import PackageRedemption, RedemptionStatus

from .exceptions import (
    CatalogServiceError,
    CouponNotFoundError,
    CouponInactiveError,
    CouponNotYetValidError,
    CouponExpiredError,
    RedemptionLimitReachedError,
    PerMemberLimitReachedError,
)


def get_coupon(
    *,
    organization_id: UUID,
    coupon_id: Optional[UUID] = None,
    coupon_code: Optional[str] = None
) -> Coupon:
    """
    Get a coupon of the organization by ID or (case-insensitive) code.

    Raises:
        CouponNotFoundError: If no such coupon exists in this organization
    """
    coupons = Coupon.objects.select_related('package').filter(organization_id=organization_id)

    try:
        if coupon_code:
            return coupons.get(code__iexact=coupon_code.strip())
        if coupon_id:
            return coupons.get(id=coupon_id)
    except (Coupon.DoesNotExist, ValidationError, ValueError):
        pass

    raise CouponNotFoundError(f"Coupon {coupon_code or coupon_id} not found")


def get_active_coupon(
    *,
    organization_id: UUID,
    coupon_id: Optional[UUID] = None,
    coupon_code: Optional[str] = None
) -> Coupon:
    """
    Get a coupon that has not been deactivated.

    Raises:
        CouponNotFoundError: If no such coupon exists in this organization
        CouponInactiveError: If the coupon is deactivated
    """
    coupon = get_coupon(
        organization_id=organization_id,
        coupon_id=coupon_id,
        coupon_code=coupon_code,
    )
    if not coupon.is_active:
        raise CouponInactiveError(f"Coupon {coupon.code} is inactive")
    return coupon


def validate_coupon(coupon: Coupon, now: Optional[datetime] = None) -> None:
    """
    Check that a coupon can be used at ``now``. First failure wins.

    Raises:
        CouponInactiveError: If the coupon is deactivated
        CouponNotYetValidError: If ``valid_from`` is in the future
        CouponExpiredError: If ``valid_until`` has passed
    """
    now = now or timezone.now()

    if not coupon.is_active:
        raise CouponInactiveError(f"Coupon {coupon.code} is inactive")
    if coupon.valid_from and coupon.valid_from > now:
        raise CouponNotYetValidError(f"Coupon {coupon.code} is not yet valid")
    if coupon.valid_until and coupon.valid_until < now:
        raise CouponExpiredError(f"Coupon {coupon.code} has expired")


def check_redemption_limits(
    coupon: Coupon,
    member_id: UUID,
    exclude_redemption_id: Optional[UUID] = None
) -> None:
    """
    Check the global and per-member caps of a coupon.

    Only ACTIVE redemptions count, so PENDING requests never block a member.
    ``exclude_redemption_id`` leaves out the redemption being approved,
    which is already ACTIVE inside the approval transaction.

    Raises:
        RedemptionLimitReachedError: If ``max_redemptions`` is reached
        PerMemberLimitReachedError: If ``max_redemptions_per_member`` is reached
    """
    active = PackageRedemption.objects.filter(
        coupon_id=coupon.id,
        status=RedemptionStatus.ACTIVE,
    )
    if exclude_redemption_id:
        active = active.exclude(id=exclude_redemption_id)

    if coupon.max_redemptions is not None:
        if active.count() >= coupon.max_redemptions:
            raise RedemptionLimitReachedError(f"Coupon {coupon.code} redemption limit reached")

    if active.filter(member_id=member_id).count() >= coupon.max_redemptions_per_member:
        raise PerMemberLimitReachedError(
            f"Coupon {coupon.code} has already been used the maximum number of times"
        )


def describe_coupon_validity(coupon: Coupon, now: Optional[datetime] = None) -> dict:
    """
    Validity verdict for coupon lookups, without consuming the coupon.

    Returns:
        dict with ``is_valid`` (bool), ``reason`` (str or None),
        ``code`` (error code or None) and ``remaining_redemptions``
        (int, or None when unlimited)
    """
    remaining = None
    if coupon.max_redemptions is not None:
        used = PackageRedemption.objects.filter(
            coupon_id=coupon.id,
            status=RedemptionStatus.ACTIVE,
        ).count()
        remaining = max(0, coupon.max_redemptions - used)

    try:
        validate_coupon(coupon, now)
    except CatalogServiceError as e:
        return {'is_valid': False, 'reason': str(e), 'code': e.code, 'remaining_redemptions': remaining}

    if remaining == 0:
        return {
            'is_valid': False,
            'reason': f"Coupon {coupon.code} redemption limit reached",
            'code': RedemptionLimitReachedError.code,
            'remaining_redemptions': remaining,
        }
    return {'is_valid': True, 'reason': None, 'code': None, 'remaining_redemptions': remaining}
