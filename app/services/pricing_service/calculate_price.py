import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.enums.customer_tiers import TIER_DISCOUNT_PERCENTAGES
from app.enums.rule_types import RuleType
from app.models.product import Product
from app.schemas.pricing import (
    AppliedDiscount,
    BundleItem,
    BundlePriceBreakdown,
    CompetitorComparison,
    CompetitorDifference,
    CompetitorPrice,
    PriceBreakdown,
)
from app.services.pricing_service.customer_tiers import TierLookup, get_customer_tier
from app.services.pricing_service.rule_store import find_applicable_rules

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


# ===================== DECIMAL HELPERS =====================


def _dec(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _percentage_of(price: Decimal, percentage) -> Decimal:
    """
    Discount for a percentage of price:
    price=100, percentage=10 -> 10
    """
    return price * _dec(percentage) / HUNDRED


# ===================== SINGLE PRODUCT =====================


def _get_sellable_product(db: Session, product_id: int) -> Product:
    product = (
        db.query(Product)
        .filter(Product.id == product_id, Product.is_active.is_(True))
        .first()
    )
    if not product:
        raise NotFoundError("Product", product_id)
    return product


def calculate_price(
    db: Session,
    product_id: int,
    quantity: int = 1,
    customer_id: Optional[int] = None,
    now: Optional[datetime] = None,
    tier_lookup: TierLookup = get_customer_tier,
) -> PriceBreakdown:
    """
    Price quantity units of an active product.

    Discounts are layered in a fixed order, each one a percentage of the
    running per-unit price:

    1. bulk      - percentage of the base price
    2. promotion - percentage of the post-bulk price
    3. category  - percentage of the post-promotion price
    4. tier      - percentage of the post-category price (only with customer_id)

    Every recorded discount amount is the per-unit step multiplied by
    quantity, while the next step keeps chaining off the per-unit price.
    """
    if quantity is None or quantity < 1:
        raise ValidationError("Invalid quantity", ["Quantity must be at least 1"])

    now = now or datetime.utcnow()
    product = _get_sellable_product(db, product_id)

    base_price = _dec(product.unit_price)
    price = base_price
    applied: List[AppliedDiscount] = []
    amounts: List[Decimal] = []

    def apply_step(discount_type: str, label: str, percentage, step: Decimal) -> None:
        nonlocal price
        price -= step
        amount = step * quantity
        amounts.append(amount)
        applied.append(
            AppliedDiscount(
                type=discount_type,
                rule=label,
                percentage=float(_dec(percentage)),
                amount=float(amount),
            )
        )

    rules = find_applicable_rules(
        db,
        product_id=product.id,
        category_id=product.category_id,
        quantity=quantity,
        now=now,
    )

    # ---- 1) Bulk (quantity threshold) ----
    bulk_rule = rules[RuleType.bulk]
    if bulk_rule is not None:
        step = _percentage_of(base_price, bulk_rule.discount_percentage)
        apply_step("bulk", bulk_rule.rule_name, bulk_rule.discount_percentage, step)

    # ---- 2) Time-bounded promotion ----
    promo_rule = rules[RuleType.promotion]
    if promo_rule is not None:
        step = _percentage_of(price, promo_rule.discount_percentage)
        apply_step("promotion", promo_rule.rule_name, promo_rule.discount_percentage, step)

    # ---- 3) Category-wide ----
    category_rule = rules[RuleType.category]
    if category_rule is not None:
        step = _percentage_of(price, category_rule.discount_percentage)
        apply_step("category", category_rule.rule_name, category_rule.discount_percentage, step)

    # ---- 4) Customer tier ----
    if customer_id is not None:
        tier = tier_lookup(customer_id)
        if tier is not None:
            percentage = TIER_DISCOUNT_PERCENTAGES[tier]
            step = _percentage_of(price, percentage)
            apply_step("customer_tier", f"{tier.value} Tier", percentage, step)

    price_per_unit = _round2(price)
    subtotal = _round2(base_price * quantity)
    total_discount = _round2(sum(amounts, Decimal("0")))
    final_total = _round2(price_per_unit * quantity)

    logger.info(
        "Price calculated for product %s: %s -> %s (quantity=%s)",
        product.id, base_price, price_per_unit, quantity,
    )

    return PriceBreakdown(
        product_id=product.id,
        product_name=product.name,
        sku=product.sku,
        quantity=quantity,
        base_price=float(_round2(base_price)),
        price_per_unit=float(price_per_unit),
        subtotal=float(subtotal),
        total_discount=float(total_discount),
        final_total=float(final_total),
        applied_discounts=applied,
        calculated_at=now,
    )


# ===================== BUNDLE =====================


def calculate_bundle_price(
    db: Session,
    items: Sequence[BundleItem],
    now: Optional[datetime] = None,
    tier_lookup: TierLookup = get_customer_tier,
) -> BundlePriceBreakdown:
    """
    Price each line on its own, then take one flat bundle discount off
    (sum of subtotals - sum of line discounts). The first failing line
    aborts the whole calculation.
    """
    if not items:
        raise ValidationError("Invalid bundle", ["Bundle must contain at least one item"])

    now = now or datetime.utcnow()
    breakdowns = [
        calculate_price(
            db,
            product_id=item.product_id,
            quantity=item.quantity,
            customer_id=item.customer_id,
            now=now,
            tier_lookup=tier_lookup,
        )
        for item in items
    ]

    percentage = _dec(settings.BUNDLE_DISCOUNT_PERCENTAGE)
    subtotal = sum((_dec(b.subtotal) for b in breakdowns), Decimal("0"))
    item_discounts = sum((_dec(b.total_discount) for b in breakdowns), Decimal("0"))
    bundle_discount = _percentage_of(subtotal - item_discounts, percentage)
    final_total = subtotal - item_discounts - bundle_discount

    return BundlePriceBreakdown(
        items=breakdowns,
        subtotal=float(_round2(subtotal)),
        item_discounts=float(_round2(item_discounts)),
        bundle_discount=float(_round2(bundle_discount)),
        bundle_discount_percentage=float(percentage),
        final_total=float(_round2(final_total)),
        calculated_at=now,
    )


# ===================== COMPETITOR COMPARISON =====================


def compare_competitors(
    db: Session,
    product_id: int,
    competitor_prices: Sequence[CompetitorPrice],
    now: Optional[datetime] = None,
) -> CompetitorComparison:
    """Position our single-unit price against competitor quotes."""
    ours = _dec(calculate_price(db, product_id, quantity=1, now=now).price_per_unit)

    competitors = []
    for cp in competitor_prices:
        their_price = _dec(cp.price)
        difference = their_price - ours
        competitors.append(
            CompetitorDifference(
                competitor=cp.name,
                price=float(their_price),
                difference=float(_round2(difference)),
                percentage_diff=float(_round2(difference / their_price * HUNDRED)),
            )
        )

    if not competitor_prices:
        positioning = "no_comparison"
    elif ours < min(_dec(cp.price) for cp in competitor_prices):
        positioning = "lowest"
    elif ours > max(_dec(cp.price) for cp in competitor_prices):
        positioning = "premium"
    else:
        positioning = "competitive"

    return CompetitorComparison(
        product_id=product_id,
        our_price=float(ours),
        competitors=competitors,
        positioning=positioning,
    )
