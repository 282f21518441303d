from __future__ import annotations

from decimal import ROUND_DOWN, Decimal

from app.promotions.constants import DEFAULT_CURRENCY_QUANTUM, PERCENT_BASE
from app.promotions.types import PromotionSnapshot, PromotionType


def _raw_discount(promotion: PromotionSnapshot, order_value: Decimal) -> Decimal:
    promotion_type = PromotionType(promotion.promotion_type)
    if promotion_type is PromotionType.PERCENTAGE:
        return order_value * promotion.value / PERCENT_BASE
    if promotion_type is PromotionType.FIXED_AMOUNT:
        return min(promotion.value, order_value)
    raise ValueError(f"unsupported promotion type: {promotion_type}")


def compute_discount(
    promotion: PromotionSnapshot,
    order_value: Decimal,
    *,
    quantum: Decimal = DEFAULT_CURRENCY_QUANTUM,
) -> Decimal:
    """Discount granted by ``promotion`` on an order worth ``order_value``.

    Assumes the order already meets ``min_order_value``. The amount is rounded
    down to ``quantum`` so the shop never gives away more than the rule allows.
    """
    if order_value < 0:
        raise ValueError("order_value must be non-negative")

    discount = _raw_discount(promotion, order_value)
    cap = promotion.max_discount_amount
    if cap is not None and cap > 0:
        discount = min(discount, cap)

    discount = discount.quantize(quantum, rounding=ROUND_DOWN)
    return max(Decimal("0"), min(discount, order_value))
