"""
Domain-specific exceptions for the catalog app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class CatalogServiceError(Exception):
    """Base exception for all catalog service errors."""

    code = 'catalog_error'


class PackageNotFoundError(CatalogServiceError):
    """Raised when a package does not exist, is inactive or belongs to another tenant."""

    code = 'package_not_found'


class CouponNotFoundError(CatalogServiceError):
    """Raised when a coupon code or ID does not exist in the organization."""

    code = 'coupon_not_found'


class CouponInactiveError(CatalogServiceError):
    """Raised when a coupon has been deactivated."""

    code = 'coupon_inactive'


class CouponNotYetValidError(CatalogServiceError):
    """Raised when a coupon's validity window has not started."""

    code = 'coupon_not_yet_valid'


class CouponExpiredError(CatalogServiceError):
    """Raised when a coupon's validity window has ended."""

    code = 'coupon_expired'


class RedemptionLimitReachedError(CatalogServiceError):
    """Raised when a coupon has reached its global redemption cap."""

    code = 'redemption_limit_reached'


class PerMemberLimitReachedError(CatalogServiceError):
    """Raised when a member has used a coupon the maximum number of times."""

    code = 'per_member_limit_reached'
