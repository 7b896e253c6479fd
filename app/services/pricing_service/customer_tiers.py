from typing import Callable, Optional

from app.enums.customer_tiers import CustomerTier

TierLookup = Callable[[int], Optional[CustomerTier]]

# Stand-in for the user service: customer_id % 4 picks the tier.
_MOCK_TIERS = [CustomerTier.vip, CustomerTier.gold, CustomerTier.silver, None]


def get_customer_tier(customer_id: int) -> Optional[CustomerTier]:
    return _MOCK_TIERS[customer_id % len(_MOCK_TIERS)]
