from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum


class PromotionType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class PromotionStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    EXPIRED = "expired"
    INACTIVE = "inactive"


class PromotionErrorKind(str, Enum):
    CODE_NOT_FOUND = "CodeNotFound"
    PROMOTION_NOT_ACTIVE = "PromotionNotActive"
    ORDER_BELOW_MINIMUM = "OrderBelowMinimum"
    USAGE_LIMIT_REACHED = "UsageLimitReached"


@dataclass(frozen=True, slots=True)
class PromotionSnapshot:
    id: int
    promo_code: str
    title: str
    description: str
    promotion_type: PromotionType
    value: Decimal
    min_order_value: Decimal
    max_discount_amount: Decimal | None
    start_date: datetime
    end_date: datetime | None
    usage_limit: int | None
    usage_count: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @property
    def has_usage_left(self) -> bool:
        return self.usage_limit is None or self.usage_count < self.usage_limit

    @property
    def remaining_uses(self) -> int | None:
        if self.usage_limit is None:
            return None
        return max(0, self.usage_limit - self.usage_count)

    @property
    def usage_percentage(self) -> float:
        if not self.usage_limit:
            return 0.0
        return self.usage_count / self.usage_limit * 100

    def with_usage_count(self, usage_count: int) -> PromotionSnapshot:
        return replace(self, usage_count=usage_count)


@dataclass(frozen=True, slots=True)
class PromotionRejection:
    kind: PromotionErrorKind
    detail: str | None = None
    status: PromotionStatus | None = None
    starts_in_seconds: int | None = None
    min_order_value: Decimal | None = None
    shortfall: Decimal | None = None
    usage_limit: int | None = None


@dataclass(frozen=True, slots=True)
class ValidationResult:
    is_valid: bool
    promotion: PromotionSnapshot | None = None
    discount_amount: Decimal | None = None
    error: PromotionRejection | None = None

    @classmethod
    def accepted(cls, promotion: PromotionSnapshot, discount_amount: Decimal) -> ValidationResult:
        return cls(is_valid=True, promotion=promotion, discount_amount=discount_amount)

    @classmethod
    def rejected(cls, error: PromotionRejection) -> ValidationResult:
        return cls(is_valid=False, error=error)


@dataclass(frozen=True, slots=True)
class PromotionStatistics:
    total_promotions: int
    active_promotions: int
    expired_promotions: int
    upcoming_promotions: int
    inactive_promotions: int
    total_usage: int
    average_percentage_value: Decimal | None
    average_fixed_amount: Decimal | None
