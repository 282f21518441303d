from __future__ import annotations

from datetime import datetime

from app.promotions.types import PromotionSnapshot, PromotionStatus


def derive_status(promotion: PromotionSnapshot, now_utc: datetime) -> PromotionStatus:
    """Lifecycle state of a promotion at ``now_utc``.

    The kill switch wins over the date window; a start in the future wins
    over an end in the past. Never cache the result: time moves on without
    any write to the record.
    """
    if not promotion.is_active:
        return PromotionStatus.INACTIVE
    if promotion.start_date > now_utc:
        return PromotionStatus.UPCOMING
    if promotion.end_date is not None and promotion.end_date < now_utc:
        return PromotionStatus.EXPIRED
    return PromotionStatus.ACTIVE
