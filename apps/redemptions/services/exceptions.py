"""
Domain exceptions for the redemption workflow and All-Access usage.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.

Exception Hierarchy:
    RedemptionServiceError (base)
    ├── RedemptionNotFoundError
    ├── PackageRequiredError
    ├── InvalidStateError
    ├── RedemptionNotActiveError
    ├── EntitlementExpiredError
    └── DayAlreadyUsedError
"""


class RedemptionServiceError(Exception):
    """Base exception for all redemption service errors."""

    code = 'redemption_error'


class RedemptionNotFoundError(RedemptionServiceError):
    """Raised when a redemption does not exist in the caller's organization."""

    code = 'redemption_not_found'


class PackageRequiredError(RedemptionServiceError):
    """Raised when neither the request nor the coupon names a package."""

    code = 'package_required'


class InvalidStateError(RedemptionServiceError):
    """Raised when a redemption is not in the state a transition requires."""

    code = 'invalid_state'


class RedemptionNotActiveError(RedemptionServiceError):
    """Raised when usage is recorded against a redemption that is not an active All-Access window."""

    code = 'redemption_not_active'


class EntitlementExpiredError(RedemptionServiceError):
    """Raised when the usage date falls after the All-Access window."""

    code = 'entitlement_expired'


class EntitlementNotStartedError(RedemptionServiceError):
    """Raised when the usage date falls before the All-Access window started."""

    code = 'entitlement_not_started'


class DayAlreadyUsedError(RedemptionServiceError):
    """Raised when the All-Access day has already been consumed."""

    code = 'day_already_used'
