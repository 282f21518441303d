from __future__ import annotations

import math
from datetime import datetime, timezone
from decimal import Decimal

import structlog

from app.core.config import get_settings
from app.promotions.discount import compute_discount
from app.promotions.status import derive_status
from app.promotions.store import PromotionStore
from app.promotions.types import (
    PromotionErrorKind,
    PromotionRejection,
    PromotionSnapshot,
    PromotionStatistics,
    PromotionStatus,
    ValidationResult,
)
from app.services.promo_codes import normalize_promo_code

logger = structlog.get_logger(__name__)

ACTIVE_PROMOTIONS_LIMIT = 50


def _as_decimal(value: Decimal | int | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _not_active_rejection(
    promotion: PromotionSnapshot,
    *,
    status: PromotionStatus,
    now_utc: datetime,
) -> PromotionRejection:
    starts_in_seconds = None
    if status is PromotionStatus.UPCOMING:
        starts_in_seconds = math.ceil((promotion.start_date - now_utc).total_seconds())
    return PromotionRejection(
        kind=PromotionErrorKind.PROMOTION_NOT_ACTIVE,
        detail=f"promotion is {status.value}",
        status=status,
        starts_in_seconds=starts_in_seconds,
    )


def _usage_limit_rejection(promotion: PromotionSnapshot) -> PromotionRejection:
    return PromotionRejection(
        kind=PromotionErrorKind.USAGE_LIMIT_REACHED,
        detail="promotion usage limit reached",
        usage_limit=promotion.usage_limit,
    )


class PromotionService:
    @staticmethod
    async def _check_eligibility(
        store: PromotionStore,
        *,
        promo_code: str,
        order_value: Decimal,
        now_utc: datetime,
    ) -> tuple[PromotionSnapshot | None, PromotionRejection | None]:
        if order_value < 0:
            raise ValueError("order_value must be non-negative")

        normalized_code = normalize_promo_code(promo_code)
        promotion = None
        if normalized_code:
            promotion = await store.find_by_code(normalized_code)
        if promotion is None:
            return None, PromotionRejection(
                kind=PromotionErrorKind.CODE_NOT_FOUND,
                detail="promotion code not found",
            )

        status = derive_status(promotion, now_utc)
        if status is not PromotionStatus.ACTIVE:
            return promotion, _not_active_rejection(promotion, status=status, now_utc=now_utc)

        if order_value < promotion.min_order_value:
            return promotion, PromotionRejection(
                kind=PromotionErrorKind.ORDER_BELOW_MINIMUM,
                detail=f"order value must be at least {promotion.min_order_value}",
                min_order_value=promotion.min_order_value,
                shortfall=promotion.min_order_value - order_value,
            )

        return promotion, None

    @staticmethod
    async def validate(
        store: PromotionStore,
        *,
        promo_code: str,
        order_value: Decimal | int | float,
        now_utc: datetime | None = None,
    ) -> ValidationResult:
        """Preview whether ``promo_code`` applies to an order. Read-only."""
        now_utc = now_utc or datetime.now(timezone.utc)
        order_value = _as_decimal(order_value)

        promotion, rejection = await PromotionService._check_eligibility(
            store,
            promo_code=promo_code,
            order_value=order_value,
            now_utc=now_utc,
        )
        if rejection is not None:
            return ValidationResult.rejected(rejection)
        assert promotion is not None

        if not promotion.has_usage_left:
            return ValidationResult.rejected(_usage_limit_rejection(promotion))

        discount_amount = compute_discount(
            promotion,
            order_value,
            quantum=get_settings().promo_currency_quantum,
        )
        return ValidationResult.accepted(promotion, discount_amount)

    @staticmethod
    async def redeem(
        store: PromotionStore,
        *,
        promo_code: str,
        order_value: Decimal | int | float,
        now_utc: datetime | None = None,
    ) -> ValidationResult:
        """Apply ``promo_code`` to an order being placed, consuming one usage slot.

        The usage-limit check and the increment are a single store operation,
        so racing redemptions of the same code can never overshoot the limit.
        A lost race is reported as ``UsageLimitReached`` and is not retried.
        """
        now_utc = now_utc or datetime.now(timezone.utc)
        order_value = _as_decimal(order_value)

        promotion, rejection = await PromotionService._check_eligibility(
            store,
            promo_code=promo_code,
            order_value=order_value,
            now_utc=now_utc,
        )
        if rejection is not None:
            logger.info(
                "promotion_redeem_rejected",
                promotion_id=None if promotion is None else promotion.id,
                reason=rejection.kind.value,
            )
            return ValidationResult.rejected(rejection)
        assert promotion is not None

        usage_count = await store.increment_usage_if_below_limit(promotion.id)
        if usage_count is None:
            logger.info(
                "promotion_redeem_rejected",
                promotion_id=promotion.id,
                reason=PromotionErrorKind.USAGE_LIMIT_REACHED.value,
                usage_limit=promotion.usage_limit,
            )
            return ValidationResult.rejected(_usage_limit_rejection(promotion))

        # The increment never touches discount fields.
        discount_amount = compute_discount(
            promotion,
            order_value,
            quantum=get_settings().promo_currency_quantum,
        )
        logger.info(
            "promotion_redeemed",
            promotion_id=promotion.id,
            usage_count=usage_count,
            usage_limit=promotion.usage_limit,
            discount_amount=str(discount_amount),
        )
        return ValidationResult.accepted(promotion.with_usage_count(usage_count), discount_amount)

    @staticmethod
    async def get_by_code(store: PromotionStore, *, promo_code: str) -> PromotionSnapshot | None:
        normalized_code = normalize_promo_code(promo_code)
        if not normalized_code:
            return None
        return await store.find_by_code(normalized_code)

    @staticmethod
    async def get_by_id(store: PromotionStore, *, promotion_id: int) -> PromotionSnapshot | None:
        return await store.find_by_id(promotion_id)

    @staticmethod
    async def list_active(
        store: PromotionStore,
        *,
        now_utc: datetime | None = None,
        limit: int = ACTIVE_PROMOTIONS_LIMIT,
    ) -> list[PromotionSnapshot]:
        now_utc = now_utc or datetime.now(timezone.utc)
        candidates = await store.list_usable(now_utc=now_utc, limit=limit)
        return [
            promotion
            for promotion in candidates
            if derive_status(promotion, now_utc) is PromotionStatus.ACTIVE
            and promotion.has_usage_left
        ]

    @staticmethod
    async def statistics(
        store: PromotionStore,
        *,
        now_utc: datetime | None = None,
    ) -> PromotionStatistics:
        return await store.statistics(now_utc=now_utc or datetime.now(timezone.utc))
