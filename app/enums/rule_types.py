from enum import Enum


class RuleType(str, Enum):
    bulk = "bulk"
    promotion = "promotion"
    category = "category"
