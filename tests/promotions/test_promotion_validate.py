from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from app.promotions.service import PromotionService
from app.promotions.types import PromotionErrorKind, PromotionStatus, PromotionType
from tests.promotions.promotion_fixtures import NOW_UTC, InMemoryPromotionStore, make_promotion


def _capped_ten_percent() -> InMemoryPromotionStore:
    return InMemoryPromotionStore(
        make_promotion(
            promo_code="GIFT10",
            value=10,
            min_order_value=100_000,
            max_discount_amount=15_000,
        )
    )


@pytest.mark.asyncio
async def test_validate_applies_capped_percentage() -> None:
    result = await PromotionService.validate(
        _capped_ten_percent(), promo_code="GIFT10", order_value=200_000, now_utc=NOW_UTC
    )

    assert result.is_valid is True
    assert result.discount_amount == Decimal("15000")
    assert result.promotion is not None
    assert result.promotion.promo_code == "GIFT10"
    assert result.error is None


@pytest.mark.asyncio
async def test_validate_rejects_order_below_minimum_with_shortfall() -> None:
    result = await PromotionService.validate(
        _capped_ten_percent(), promo_code="GIFT10", order_value=50_000, now_utc=NOW_UTC
    )

    assert result.is_valid is False
    assert result.error is not None
    assert result.error.kind == PromotionErrorKind.ORDER_BELOW_MINIMUM
    assert result.error.min_order_value == Decimal("100000")
    assert result.error.shortfall == Decimal("50000")
    assert result.discount_amount is None


@pytest.mark.asyncio
async def test_validate_minimum_order_bound_is_inclusive() -> None:
    store = _capped_ten_percent()

    at_minimum = await PromotionService.validate(
        store, promo_code="GIFT10", order_value=Decimal("100000"), now_utc=NOW_UTC
    )
    below_minimum = await PromotionService.validate(
        store, promo_code="GIFT10", order_value=Decimal("99999.99"), now_utc=NOW_UTC
    )

    assert at_minimum.is_valid is True
    assert at_minimum.discount_amount == Decimal("10000")
    assert below_minimum.is_valid is False
    assert below_minimum.error is not None
    assert below_minimum.error.kind == PromotionErrorKind.ORDER_BELOW_MINIMUM


@pytest.mark.asyncio
async def test_validate_normalizes_code_before_lookup() -> None:
    result = await PromotionService.validate(
        _capped_ten_percent(), promo_code="  gift10 ", order_value=200_000, now_utc=NOW_UTC
    )
    assert result.is_valid is True


@pytest.mark.asyncio
@pytest.mark.parametrize("promo_code", ["NOPE", "", "   "])
async def test_validate_unknown_code(promo_code: str) -> None:
    result = await PromotionService.validate(
        _capped_ten_percent(), promo_code=promo_code, order_value=200_000, now_utc=NOW_UTC
    )

    assert result.is_valid is False
    assert result.error is not None
    assert result.error.kind == PromotionErrorKind.CODE_NOT_FOUND
    assert result.promotion is None


@pytest.mark.asyncio
async def test_validate_upcoming_promotion_reports_time_until_start() -> None:
    store = InMemoryPromotionStore(
        make_promotion(promo_code="SOON", start_date=NOW_UTC + timedelta(days=1))
    )

    result = await PromotionService.validate(
        store, promo_code="SOON", order_value=100_000, now_utc=NOW_UTC
    )

    assert result.is_valid is False
    assert result.error is not None
    assert result.error.kind == PromotionErrorKind.PROMOTION_NOT_ACTIVE
    assert result.error.status == PromotionStatus.UPCOMING
    assert result.error.starts_in_seconds == 86_400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("promotion_kwargs", "expected_status"),
    [
        ({"end_date": NOW_UTC - timedelta(days=1)}, PromotionStatus.EXPIRED),
        ({"is_active": False}, PromotionStatus.INACTIVE),
    ],
)
async def test_validate_rejects_promotions_outside_their_window(
    promotion_kwargs: dict[str, object],
    expected_status: PromotionStatus,
) -> None:
    store = InMemoryPromotionStore(make_promotion(promo_code="OLD", **promotion_kwargs))

    result = await PromotionService.validate(
        store, promo_code="OLD", order_value=100_000, now_utc=NOW_UTC
    )

    assert result.is_valid is False
    assert result.error is not None
    assert result.error.kind == PromotionErrorKind.PROMOTION_NOT_ACTIVE
    assert result.error.status == expected_status
    assert result.error.starts_in_seconds is None


@pytest.mark.asyncio
async def test_validate_status_is_checked_before_minimum_order() -> None:
    store = InMemoryPromotionStore(
        make_promotion(promo_code="OFF", is_active=False, min_order_value=100_000)
    )

    result = await PromotionService.validate(store, promo_code="OFF", order_value=1, now_utc=NOW_UTC)

    assert result.error is not None
    assert result.error.kind == PromotionErrorKind.PROMOTION_NOT_ACTIVE


@pytest.mark.asyncio
async def test_validate_rejects_exhausted_usage_limit() -> None:
    store = InMemoryPromotionStore(make_promotion(promo_code="ONCE", usage_limit=1, usage_count=1))

    result = await PromotionService.validate(
        store, promo_code="ONCE", order_value=100_000, now_utc=NOW_UTC
    )

    assert result.is_valid is False
    assert result.error is not None
    assert result.error.kind == PromotionErrorKind.USAGE_LIMIT_REACHED
    assert result.error.usage_limit == 1


@pytest.mark.asyncio
async def test_validate_is_repeatable_and_side_effect_free() -> None:
    store = InMemoryPromotionStore(
        make_promotion(
            promo_code="FIXED",
            promotion_type=PromotionType.FIXED_AMOUNT,
            value=30_000,
            usage_limit=3,
        )
    )

    results = [
        await PromotionService.validate(
            store, promo_code="FIXED", order_value=90_000, now_utc=NOW_UTC
        )
        for _ in range(5)
    ]

    assert all(result == results[0] for result in results)
    assert results[0].discount_amount == Decimal("30000")
    assert store.get(1).usage_count == 0
    assert store.increment_calls == 0


@pytest.mark.asyncio
async def test_validate_rejects_negative_order_value() -> None:
    with pytest.raises(ValueError):
        await PromotionService.validate(
            _capped_ten_percent(), promo_code="GIFT10", order_value=-1, now_utc=NOW_UTC
        )
