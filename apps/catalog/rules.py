"""
Typed coupon rules.

A ``Coupon`` row stores every rule shape in nullable columns; the workflow
only ever sees one of the variants below, chosen by ``coupon_type``.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from .models import Coupon, CouponType, DiscountType


@dataclass(frozen=True)
class DiscountRule:
    """Percentage or fixed amount off the package price."""
    discount_type: str
    value: Decimal

    @property
    def is_percentage(self) -> bool:
        return self.discount_type == DiscountType.PERCENTAGE


@dataclass(frozen=True)
class PackageRule:
    """Grants a specific package, optionally at a custom price / credit count."""
    package_id: Optional[UUID]
    custom_price: Optional[Decimal]
    custom_credits: Optional[int]


@dataclass(frozen=True)
class BonusRule:
    """Extra credits on top of the package credits."""
    bonus_credits: int


CouponRule = Union[DiscountRule, PackageRule, BonusRule]


def coupon_rule(coupon: Coupon) -> CouponRule:
    """
    Build the typed rule of a coupon.

    Raises:
        ValueError: If the coupon type is unknown
    """
    if coupon.coupon_type == CouponType.DISCOUNT:
        return DiscountRule(
            discount_type=coupon.discount_type,
            value=coupon.discount_value or Decimal('0'),
        )
    if coupon.coupon_type == CouponType.PACKAGE:
        return PackageRule(
            package_id=coupon.package_id,
            custom_price=coupon.custom_price,
            custom_credits=coupon.custom_credits,
        )
    if coupon.coupon_type == CouponType.CREDIT_BONUS:
        return BonusRule(bonus_credits=coupon.bonus_credits or 0)
    raise ValueError(f"Unknown coupon type: {coupon.coupon_type}")
