"""
Billing Types
=============
Billing period classification for extracted plans.

RULE: When uncertain -> UNKNOWN, never a best guess.
"""

from enum import Enum


class BillingPeriod(Enum):
    """How often the customer is actually charged."""

    MONTHLY = "monthly"
    # Charged every month ("billed monthly", "$12/mo billed monthly")

    YEARLY = "yearly"
    # Charged once per year ("billed annually", "$120/year")
    # A per-month figure shown next to it is only a monthly equivalent.

    UNKNOWN = "unknown"
    # No explicit billing indicator on the page


_ALIASES = {
    "monthly": BillingPeriod.MONTHLY,
    "month": BillingPeriod.MONTHLY,
    "yearly": BillingPeriod.YEARLY,
    "year": BillingPeriod.YEARLY,
    "annual": BillingPeriod.YEARLY,
    "annually": BillingPeriod.YEARLY,
}


def parse_billing_period(value) -> BillingPeriod:
    """
    Parses a billing period from model output.

    Args:
        value: BillingPeriod, string or None

    Returns:
        BillingPeriod (UNKNOWN for anything unrecognised)
    """
    if isinstance(value, BillingPeriod):
        return value
    if not value:
        return BillingPeriod.UNKNOWN
    return _ALIASES.get(str(value).strip().lower(), BillingPeriod.UNKNOWN)
