"""
Catalog app services layer.

Lookup and validation of packages and coupons. Reads only; admin edits go
through the catalog viewsets.
"""

from .exceptions import (
    CatalogServiceError,
    PackageNotFoundError,
    CouponNotFoundError,
    CouponInactiveError,
    CouponNotYetValidError,
    CouponExpiredError,
    RedemptionLimitReachedError,
    PerMemberLimitReachedError,
)

from .package_lookup import (
    get_active_package,
    get_package,
    list_packages,
)

from .coupon_validation import (
    get_coupon,
    get_active_coupon,
    validate_coupon,
    check_redemption_limits,
    describe_coupon_validity,
)


__all__ = [
    # Exceptions
    'CatalogServiceError',
    'PackageNotFoundError',
    'CouponNotFoundError',
    'CouponInactiveError',
    'CouponNotYetValidError',
    'CouponExpiredError',
    'RedemptionLimitReachedError',
    'PerMemberLimitReachedError',

    # Packages
    'get_active_package',
    'get_package',
    'list_packages',

    # Coupons
    'get_coupon',
    'get_active_coupon',
    'validate_coupon',
    'check_redemption_limits',
    'describe_coupon_validity',
]
