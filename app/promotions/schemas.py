from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.promotions.constants import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    MAX_PERCENTAGE_VALUE,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from app.promotions.types import PromotionType
from app.services.promo_codes import is_well_formed_promo_code, normalize_promo_code


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PromotionDraft(BaseModel):
    """Administrator input for a new promotion, checked before it reaches the store."""

    promo_code: str
    title: str = Field(min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)
    description: str = Field(min_length=DESCRIPTION_MIN_LENGTH, max_length=DESCRIPTION_MAX_LENGTH)
    promotion_type: PromotionType
    value: Decimal = Field(ge=0)
    min_order_value: Decimal = Field(default=Decimal("0"), ge=0)
    max_discount_amount: Decimal | None = Field(default=None, ge=0)
    start_date: datetime
    end_date: datetime | None = None
    usage_limit: int | None = Field(default=None, gt=0)
    is_active: bool = True

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("promo_code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        if not is_well_formed_promo_code(value):
            raise ValueError("promo_code must be 3-20 characters of A-Z, 0-9 or _")
        return normalize_promo_code(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalize_dates(cls, value: datetime | None) -> datetime | None:
        return None if value is None else _as_utc(value)

    @model_validator(mode="after")
    def _check_rules(self) -> PromotionDraft:
        if self.promotion_type is PromotionType.PERCENTAGE and self.value > MAX_PERCENTAGE_VALUE:
            raise ValueError("percentage value must be between 0 and 100")
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self
