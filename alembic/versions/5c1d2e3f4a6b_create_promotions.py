"""create_promotions

Revision ID: 5c1d2e3f4a6b
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "5c1d2e3f4a6b"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "promotions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("promo_code", sa.String(20), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("promotion_type", sa.String(16), nullable=False),
        sa.Column("value", sa.Numeric(14, 2), nullable=False),
        sa.Column("min_order_value", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("max_discount_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("usage_limit", sa.Integer(), nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("promotion_type IN ('PERCENTAGE','FIXED_AMOUNT')", name="ck_promotions_type"),
        sa.CheckConstraint("value >= 0", name="ck_promotions_value_non_negative"),
        sa.CheckConstraint(
            "promotion_type <> 'PERCENTAGE' OR value <= 100",
            name="ck_promotions_percentage_le_100",
        ),
        sa.CheckConstraint("min_order_value >= 0", name="ck_promotions_min_order_non_negative"),
        sa.CheckConstraint(
            "max_discount_amount IS NULL OR max_discount_amount >= 0",
            name="ck_promotions_max_discount_non_negative",
        ),
        sa.CheckConstraint("end_date IS NULL OR end_date > start_date", name="ck_promotions_date_window"),
        sa.CheckConstraint("usage_limit IS NULL OR usage_limit > 0", name="ck_promotions_usage_limit_positive"),
        sa.CheckConstraint("usage_count >= 0", name="ck_promotions_usage_count_non_negative"),
        sa.CheckConstraint(
            "usage_limit IS NULL OR usage_count <= usage_limit",
            name="ck_promotions_usage_count_le_limit",
        ),
        sa.CheckConstraint("promo_code = upper(promo_code)", name="ck_promotions_code_uppercase"),
        sa.UniqueConstraint("promo_code", name="uq_promotions_promo_code"),
    )
    op.create_index("idx_promotions_start_date", "promotions", ["start_date"])
    op.create_index("idx_promotions_end_date", "promotions", ["end_date"])
    op.create_index("idx_promotions_is_active", "promotions", ["is_active"])


def downgrade() -> None:
    op.drop_index("idx_promotions_is_active", table_name="promotions")
    op.drop_index("idx_promotions_end_date", table_name="promotions")
    op.drop_index("idx_promotions_start_date", table_name="promotions")
    op.drop_table("promotions")
