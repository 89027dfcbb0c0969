"""
Redemptions app services layer.

Redemption workflow (create / approve / cancel / use), pricing, the
All-Access expiry sweep and the daily usage tracker.
"""

from .exceptions import (
    RedemptionServiceError,
    RedemptionNotFoundError,
    PackageRequiredError,
    InvalidStateError,
    RedemptionNotActiveError,
    EntitlementExpiredError,
    EntitlementNotStartedError,
    DayAlreadyUsedError,
)

from .pricing import (
    Quote,
    quote,
)

from .redemption_workflow import (
    get_redemption,
    list_redemptions,
    create_redemption,
    approve_redemption,
    cancel_redemption,
    mark_redemption_used,
)

from .expiration import (
    expire_redemptions,
)

from .entitlement_usage import (
    record_daily_usage,
    release_daily_usage,
    list_daily_usage,
    can_book_without_credits,
)


__all__ = [
    # Exceptions
    'RedemptionServiceError',
    'RedemptionNotFoundError',
    'PackageRequiredError',
    'InvalidStateError',
    'RedemptionNotActiveError',
    'EntitlementExpiredError',
    'EntitlementNotStartedError',
    'DayAlreadyUsedError',

    # Pricing
    'Quote',
    'quote',

    # Workflow
    'get_redemption',
    'list_redemptions',
    'create_redemption',
    'approve_redemption',
    'cancel_redemption',
    'mark_redemption_used',

    # Expiry
    'expire_redemptions',

    # All-Access usage
    'record_daily_usage',
    'release_daily_usage',
    'list_daily_usage',
    'can_book_without_credits',
]
