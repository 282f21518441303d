from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# JSON numbers, as the storefront client reads them. Numeric(14, 2) values stay under
# 15 significant digits, so the shortest float repr equals the stored decimal.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PromotionCheckRequest(CamelModel):
    promo_code: str = Field(min_length=1, max_length=64)
    order_value: Decimal = Field(ge=0, max_digits=16, decimal_places=2)


class PromotionResponse(CamelModel):
    id: int
    promo_code: str
    title: str
    description: str
    type: str
    value: Money
    min_order_value: Money
    max_discount_amount: Money | None = None
    start_date: datetime
    end_date: datetime | None = None
    usage_limit: int | None = None
    usage_count: int = Field(ge=0)
    remaining_uses: int | None = None
    usage_percentage: float = Field(ge=0)
    is_active: bool
    status: str
    created_at: datetime
    updated_at: datetime


class PromotionErrorResponse(CamelModel):
    kind: str
    detail: str | None = None
    status: str | None = None
    starts_in_seconds: int | None = None
    min_order_value: Money | None = None
    shortfall: Money | None = None
    usage_limit: int | None = None


class ValidationResultResponse(CamelModel):
    is_valid: bool
    promotion: PromotionResponse | None = None
    discount_amount: Money | None = None
    error: PromotionErrorResponse | None = None


class PromotionListResponse(CamelModel):
    promotions: list[PromotionResponse]


class PromotionStatisticsResponse(CamelModel):
    generated_at: datetime
    total_promotions: int = Field(ge=0)
    active_promotions: int = Field(ge=0)
    expired_promotions: int = Field(ge=0)
    upcoming_promotions: int = Field(ge=0)
    inactive_promotions: int = Field(ge=0)
    total_usage: int = Field(ge=0)
    average_percentage_value: Money | None = None
    average_fixed_amount: Money | None = None
    # Dashboard field: the mean percentage of PERCENTAGE promotions.
    average_discount: Money | None = None
