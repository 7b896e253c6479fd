from enum import Enum


class CustomerTier(str, Enum):
    vip = "VIP"
    gold = "Gold"
    silver = "Silver"


TIER_DISCOUNT_PERCENTAGES = {
    CustomerTier.vip: 10,
    CustomerTier.gold: 5,
    CustomerTier.silver: 2,
}
