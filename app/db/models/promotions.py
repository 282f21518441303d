from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BOOLEAN,
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base

PROMO_CODE_UNIQUE_CONSTRAINT = "uq_promotions_promo_code"


class Promotion(Base):
    __tablename__ = "promotions"
    __table_args__ = (
        CheckConstraint(
            "promotion_type IN ('PERCENTAGE','FIXED_AMOUNT')",
            name="ck_promotions_type",
        ),
        CheckConstraint("value >= 0", name="ck_promotions_value_non_negative"),
        CheckConstraint(
            "promotion_type <> 'PERCENTAGE' OR value <= 100",
            name="ck_promotions_percentage_le_100",
        ),
        CheckConstraint("min_order_value >= 0", name="ck_promotions_min_order_non_negative"),
        CheckConstraint(
            "max_discount_amount IS NULL OR max_discount_amount >= 0",
            name="ck_promotions_max_discount_non_negative",
        ),
        CheckConstraint(
            "end_date IS NULL OR end_date > start_date",
            name="ck_promotions_date_window",
        ),
        CheckConstraint(
            "usage_limit IS NULL OR usage_limit > 0",
            name="ck_promotions_usage_limit_positive",
        ),
        CheckConstraint("usage_count >= 0", name="ck_promotions_usage_count_non_negative"),
        CheckConstraint(
            "usage_limit IS NULL OR usage_count <= usage_limit",
            name="ck_promotions_usage_count_le_limit",
        ),
        CheckConstraint("promo_code = upper(promo_code)", name="ck_promotions_code_uppercase"),
        UniqueConstraint("promo_code", name=PROMO_CODE_UNIQUE_CONSTRAINT),
        Index("idx_promotions_start_date", "start_date"),
        Index("idx_promotions_end_date", "end_date"),
        Index("idx_promotions_is_active", "is_active"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    promo_code: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    promotion_type: Mapped[str] = mapped_column(String(16), nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    min_order_value: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, server_default=text("0")
    )
    max_discount_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    usage_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    is_active: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
