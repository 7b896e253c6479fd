from datetime import date, datetime
from typing import Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.enums.rule_types import RuleType
from app.models.pricing_rule import PricingRule


def _window_open(today: date):
    """Null bounds are unbounded."""
    return (
        or_(PricingRule.valid_from.is_(None), PricingRule.valid_from <= today),
        or_(PricingRule.valid_until.is_(None), PricingRule.valid_until >= today),
    )


def find_bulk_rule(db: Session, product_id: int, quantity: int, today: date) -> Optional[PricingRule]:
    """Closest-matching quantity tier: the highest min_quantity not above quantity."""
    return (
        db.query(PricingRule)
        .filter(
            PricingRule.product_id == product_id,
            PricingRule.rule_type == RuleType.bulk.value,
            PricingRule.is_active.is_(True),
            PricingRule.min_quantity <= quantity,
            *_window_open(today),
        )
        .order_by(PricingRule.min_quantity.desc(), PricingRule.id.asc())
        .first()
    )


def find_promotion_rule(db: Session, product_id: int, today: date) -> Optional[PricingRule]:
    """Product or global promotion whose window is bounded on both ends and open today."""
    return (
        db.query(PricingRule)
        .filter(
            or_(PricingRule.product_id == product_id, PricingRule.product_id.is_(None)),
            PricingRule.rule_type == RuleType.promotion.value,
            PricingRule.is_active.is_(True),
            PricingRule.valid_from.is_not(None),
            PricingRule.valid_until.is_not(None),
            PricingRule.valid_from <= today,
            PricingRule.valid_until >= today,
        )
        .order_by(PricingRule.discount_percentage.desc(), PricingRule.id.asc())
        .first()
    )


def find_category_rule(db: Session, category_id: Optional[int], today: date) -> Optional[PricingRule]:
    if category_id is None:
        return None
    return (
        db.query(PricingRule)
        .filter(
            PricingRule.category_id == category_id,
            PricingRule.rule_type == RuleType.category.value,
            PricingRule.is_active.is_(True),
            *_window_open(today),
        )
        .order_by(PricingRule.discount_percentage.desc(), PricingRule.id.asc())
        .first()
    )


def find_applicable_rules(
    db: Session,
    product_id: int,
    category_id: Optional[int],
    quantity: int,
    now: Optional[datetime] = None,
) -> Dict[RuleType, Optional[PricingRule]]:
    """At most one rule per rule type; None means no rule of that type applies."""
    today = (now or datetime.utcnow()).date()
    return {
        RuleType.bulk: find_bulk_rule(db, product_id, quantity, today),
        RuleType.promotion: find_promotion_rule(db, product_id, today),
        RuleType.category: find_category_rule(db, category_id, today),
    }
