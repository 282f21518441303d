from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from app.promotions.status import derive_status
from app.promotions.types import (
    PromotionSnapshot,
    PromotionStatistics,
    PromotionStatus,
    PromotionType,
)

UTC = timezone.utc
NOW_UTC = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def make_promotion(
    *,
    promotion_id: int = 1,
    promo_code: str = "GIFT10",
    promotion_type: PromotionType = PromotionType.PERCENTAGE,
    value: Decimal | int = 10,
    min_order_value: Decimal | int = 0,
    max_discount_amount: Decimal | int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    usage_limit: int | None = None,
    usage_count: int = 0,
    is_active: bool = True,
) -> PromotionSnapshot:
    return PromotionSnapshot(
        id=promotion_id,
        promo_code=promo_code,
        title="Gift promotion",
        description="Discount on personalised gifts",
        promotion_type=promotion_type,
        value=Decimal(value),
        min_order_value=Decimal(min_order_value),
        max_discount_amount=None if max_discount_amount is None else Decimal(max_discount_amount),
        start_date=start_date or NOW_UTC - timedelta(days=7),
        end_date=end_date,
        usage_limit=usage_limit,
        usage_count=usage_count,
        is_active=is_active,
        created_at=NOW_UTC - timedelta(days=10),
        updated_at=NOW_UTC - timedelta(days=10),
    )


def _average_value(
    promotions: list[PromotionSnapshot], promotion_type: PromotionType
) -> Decimal | None:
    values = [promotion.value for promotion in promotions if promotion.promotion_type is promotion_type]
    if not values:
        return None
    return sum(values, Decimal("0")) / len(values)


class InMemoryPromotionStore:
    """Promotion store whose reads yield to the event loop, so redemptions interleave."""

    def __init__(self, *promotions: PromotionSnapshot) -> None:
        self._by_id = {promotion.id: promotion for promotion in promotions}
        self._lock = asyncio.Lock()
        self.find_calls = 0
        self.increment_calls = 0

    def get(self, promotion_id: int) -> PromotionSnapshot:
        return self._by_id[promotion_id]

    async def find_by_code(self, promo_code: str) -> PromotionSnapshot | None:
        self.find_calls += 1
        await asyncio.sleep(0)
        for promotion in self._by_id.values():
            if promotion.promo_code == promo_code:
                return promotion
        return None

    async def find_by_id(self, promotion_id: int) -> PromotionSnapshot | None:
        await asyncio.sleep(0)
        return self._by_id.get(promotion_id)

    async def increment_usage_if_below_limit(self, promotion_id: int) -> int | None:
        self.increment_calls += 1
        async with self._lock:
            await asyncio.sleep(0)
            promotion = self._by_id.get(promotion_id)
            if promotion is None or not promotion.has_usage_left:
                return None
            updated = replace(promotion, usage_count=promotion.usage_count + 1)
            self._by_id[promotion_id] = updated
            return updated.usage_count

    async def list_usable(self, *, now_utc: datetime, limit: int) -> list[PromotionSnapshot]:
        usable = [
            promotion
            for promotion in self._by_id.values()
            if derive_status(promotion, now_utc) is PromotionStatus.ACTIVE
            and promotion.has_usage_left
        ]
        return usable[:limit]

    async def statistics(self, *, now_utc: datetime) -> PromotionStatistics:
        promotions = list(self._by_id.values())
        statuses = [derive_status(promotion, now_utc) for promotion in promotions]
        return PromotionStatistics(
            total_promotions=len(promotions),
            active_promotions=statuses.count(PromotionStatus.ACTIVE),
            expired_promotions=statuses.count(PromotionStatus.EXPIRED),
            upcoming_promotions=statuses.count(PromotionStatus.UPCOMING),
            inactive_promotions=statuses.count(PromotionStatus.INACTIVE),
            total_usage=sum(promotion.usage_count for promotion in promotions),
            average_percentage_value=_average_value(promotions, PromotionType.PERCENTAGE),
            average_fixed_amount=_average_value(promotions, PromotionType.FIXED_AMOUNT),
        )
