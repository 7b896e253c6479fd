import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.enums.rule_types import RuleType
from app.models.category import Category
from app.models.pricing_rule import PricingRule
from app.models.product import Product
from app.schemas.pricing_rule import PricingRuleCreate, PricingRuleUpdate

logger = logging.getLogger(__name__)


def _validate_rule(db: Session, data: PricingRuleCreate) -> None:
    errors: List[str] = []

    if data.rule_type == RuleType.bulk and data.product_id is None:
        errors.append("Bulk rules require product_id")
    if data.rule_type == RuleType.category and data.category_id is None:
        errors.append("Category rules require category_id")
    if data.rule_type == RuleType.promotion and (data.valid_from is None or data.valid_until is None):
        errors.append("Promotion rules require both valid_from and valid_until")
    if data.valid_from and data.valid_until and data.valid_from > data.valid_until:
        errors.append("valid_from must not be after valid_until")

    if errors:
        raise ValidationError("Invalid pricing rule", errors)

    if data.product_id is not None and db.get(Product, data.product_id) is None:
        raise NotFoundError("Product", data.product_id)
    if data.category_id is not None and db.get(Category, data.category_id) is None:
        raise NotFoundError("Category", data.category_id)


def create_pricing_rule(db: Session, rule: PricingRuleCreate) -> PricingRule:
    _validate_rule(db, rule)

    values = rule.model_dump()
    values["rule_type"] = rule.rule_type.value
    db_rule = PricingRule(**values, is_active=True)
    db.add(db_rule)
    db.commit()
    db.refresh(db_rule)
    logger.info("Pricing rule created: %s (%s)", db_rule.rule_name, db_rule.rule_type)
    return db_rule

def get_pricing_rules(
    db: Session,
    rule_type: Optional[RuleType] = None,
    is_active: Optional[bool] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[PricingRule]:
    query = db.query(PricingRule)
    if rule_type is not None:
        query = query.filter(PricingRule.rule_type == RuleType(rule_type).value)
    if is_active is not None:
        query = query.filter(PricingRule.is_active.is_(is_active))
    return (
        query.order_by(PricingRule.created_at.desc(), PricingRule.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

def get_pricing_rule(db: Session, rule_id: int) -> PricingRule:
    db_rule = db.get(PricingRule, rule_id)
    if not db_rule:
        raise NotFoundError("Pricing rule", rule_id)
    return db_rule

def update_pricing_rule(db: Session, rule_id: int, rule_update: PricingRuleUpdate) -> PricingRule:
    db_rule = get_pricing_rule(db, rule_id)

    changes = rule_update.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")

    valid_from = changes.get("valid_from", db_rule.valid_from)
    valid_until = changes.get("valid_until", db_rule.valid_until)
    errors = []
    if valid_from and valid_until and valid_from > valid_until:
        errors.append("valid_from must not be after valid_until")
    if db_rule.rule_type == RuleType.promotion.value and (valid_from is None or valid_until is None):
        errors.append("Promotion rules require both valid_from and valid_until")
    if errors:
        raise ValidationError("Invalid pricing rule", errors)

    for key, value in changes.items():
        setattr(db_rule, key, value)

    db.commit()
    db.refresh(db_rule)
    logger.info("Pricing rule updated: ID %s", rule_id)
    return db_rule

def _set_rule_active(db: Session, rule_id: int, active: bool) -> PricingRule:
    db_rule = get_pricing_rule(db, rule_id)
    db_rule.is_active = active
    db.commit()
    db.refresh(db_rule)
    logger.info("Pricing rule %s %s", rule_id, "activated" if active else "deactivated")
    return db_rule

def deactivate_pricing_rule(db: Session, rule_id: int) -> PricingRule:
    return _set_rule_active(db, rule_id, False)

def activate_pricing_rule(db: Session, rule_id: int) -> PricingRule:
    return _set_rule_active(db, rule_id, True)
