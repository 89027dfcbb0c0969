"""
Redemption pricing.

Pure functions: given a package, an optional coupon and the moment of the
request, compute what the redemption will cost and grant. Nothing here
touches the database.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from zoneinfo import ZoneInfo

from django.conf import settings

from apps.catalog.models import Coupon, Package, PackageType, FRIEND_PASS_BENEFIT
from apps.catalog.rules import BonusRule, DiscountRule, PackageRule, coupon_rule

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


@dataclass(frozen=True)
class Quote:
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    credits: int
    all_access_days: Optional[int] = None
    all_access_expires_at: Optional[datetime] = None
    friend_pass_available: bool = False
    friend_pass_expires_at: Optional[datetime] = None


def to_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def end_of_day_after(now: datetime, days: int, tz_name: str) -> datetime:
    """
    Last instant of the organization-local day ``days`` days after ``now``.

    2025-01-01 10:00 + 30 days -> 2025-01-31 23:59:59.999999 (local).
    """
    local = now.astimezone(ZoneInfo(tz_name)) + timedelta(days=days)
    return local.replace(hour=23, minute=59, second=59, microsecond=999999)


def apply_discount(original: Decimal, rule: DiscountRule) -> Decimal:
    """Discount amount of a DISCOUNT coupon, never more than the price."""
    if rule.is_percentage:
        discount = to_money(original * rule.value / Decimal(100))
    else:
        discount = to_money(rule.value)
    return min(discount, original)


def quote(
    package: Package,
    coupon: Optional[Coupon] = None,
    *,
    now: datetime,
    tz_name: str = 'UTC'
) -> Quote:
    """
    Price and grants of redeeming ``package`` with ``coupon`` at ``now``.

    Args:
        package: Package actually granted (already substituted for PACKAGE coupons)
        coupon: Optional coupon applied to the redemption
        now: Moment of the request; entitlement windows start here
        tz_name: Organization timezone for end-of-day clamping
    """
    original = to_money(package.price)
    discount = ZERO
    final = original
    credits = 0 if package.type == PackageType.ALL_ACCESS else (package.credits or 0)

    rule = coupon_rule(coupon) if coupon else None

    if isinstance(rule, DiscountRule):
        discount = apply_discount(original, rule)
        final = original - discount
    elif isinstance(rule, PackageRule):
        if rule.custom_price is not None:
            final = to_money(rule.custom_price)
            discount = original - final
        if rule.custom_credits and package.type != PackageType.ALL_ACCESS:
            credits = rule.custom_credits
    elif isinstance(rule, BonusRule) and package.type != PackageType.ALL_ACCESS:
        credits += rule.bonus_credits

    all_access_days = None
    all_access_expires_at = None
    if package.type == PackageType.ALL_ACCESS:
        all_access_days = package.validity_days or settings.ALL_ACCESS_DEFAULT_DAYS
        all_access_expires_at = end_of_day_after(now, all_access_days, tz_name)

    friend_pass_available = False
    friend_pass_expires_at = None
    if package.type == PackageType.ELITE_30 and package.has_benefit(FRIEND_PASS_BENEFIT):
        friend_pass_available = True
        friend_pass_expires_at = end_of_day_after(
            now, package.validity_days or settings.FRIEND_PASS_DEFAULT_DAYS, tz_name
        )

    return Quote(
        original_price=original,
        discount_amount=discount,
        final_price=final,
        credits=credits,
        all_access_days=all_access_days,
        all_access_expires_at=all_access_expires_at,
        friend_pass_available=friend_pass_available,
        friend_pass_expires_at=friend_pass_expires_at,
    )
