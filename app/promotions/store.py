from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.promotions import PROMO_CODE_UNIQUE_CONSTRAINT, Promotion
from app.db.repo.promotions_repo import PromotionsRepo
from app.promotions.errors import PromotionCodeTakenError, PromotionStoreError
from app.promotions.schemas import PromotionDraft
from app.promotions.types import (
    PromotionSnapshot,
    PromotionStatistics,
    PromotionStatus,
    PromotionType,
)

T = TypeVar("T")


class PromotionStore(Protocol):
    async def find_by_code(self, promo_code: str) -> PromotionSnapshot | None: ...

    async def find_by_id(self, promotion_id: int) -> PromotionSnapshot | None: ...

    async def increment_usage_if_below_limit(self, promotion_id: int) -> int | None: ...

    async def list_usable(self, *, now_utc: datetime, limit: int) -> list[PromotionSnapshot]: ...

    async def statistics(self, *, now_utc: datetime) -> PromotionStatistics: ...


def snapshot_from_row(row: Promotion) -> PromotionSnapshot:
    return PromotionSnapshot(
        id=row.id,
        promo_code=row.promo_code,
        title=row.title,
        description=row.description,
        promotion_type=PromotionType(row.promotion_type),
        value=Decimal(row.value),
        min_order_value=Decimal(row.min_order_value),
        max_discount_amount=(
            None if row.max_discount_amount is None else Decimal(row.max_discount_amount)
        ),
        start_date=row.start_date,
        end_date=row.end_date,
        usage_limit=row.usage_limit,
        usage_count=row.usage_count,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlPromotionStore:
    """Promotion store backed by the caller's SQLAlchemy session and transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _run(self, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await operation()
        except SQLAlchemyError as exc:
            raise PromotionStoreError(str(exc)) from exc

    async def find_by_code(self, promo_code: str) -> PromotionSnapshot | None:
        row = await self._run(lambda: PromotionsRepo.get_by_code(self._session, promo_code))
        return None if row is None else snapshot_from_row(row)

    async def find_by_id(self, promotion_id: int) -> PromotionSnapshot | None:
        row = await self._run(lambda: PromotionsRepo.get_by_id(self._session, promotion_id))
        return None if row is None else snapshot_from_row(row)

    async def increment_usage_if_below_limit(self, promotion_id: int) -> int | None:
        now_utc = datetime.now(timezone.utc)
        return await self._run(
            lambda: PromotionsRepo.increment_usage_if_below_limit(
                self._session,
                promotion_id=promotion_id,
                now_utc=now_utc,
            )
        )

    async def list_usable(self, *, now_utc: datetime, limit: int) -> list[PromotionSnapshot]:
        rows = await self._run(
            lambda: PromotionsRepo.list_usable(self._session, now_utc=now_utc, limit=limit)
        )
        return [snapshot_from_row(row) for row in rows]

    async def statistics(self, *, now_utc: datetime) -> PromotionStatistics:
        status_counts = await self._run(
            lambda: PromotionsRepo.count_by_status(self._session, now_utc=now_utc)
        )
        total_usage = await self._run(lambda: PromotionsRepo.sum_usage(self._session))
        averages = await self._run(lambda: PromotionsRepo.average_value_by_type(self._session))
        return PromotionStatistics(
            total_promotions=sum(status_counts.values()),
            active_promotions=status_counts.get(PromotionStatus.ACTIVE.value, 0),
            expired_promotions=status_counts.get(PromotionStatus.EXPIRED.value, 0),
            upcoming_promotions=status_counts.get(PromotionStatus.UPCOMING.value, 0),
            inactive_promotions=status_counts.get(PromotionStatus.INACTIVE.value, 0),
            total_usage=total_usage,
            average_percentage_value=averages.get(PromotionType.PERCENTAGE.value),
            average_fixed_amount=averages.get(PromotionType.FIXED_AMOUNT.value),
        )

    async def create(self, draft: PromotionDraft, *, now_utc: datetime) -> PromotionSnapshot:
        """Insert a promotion; the unique index on ``promo_code`` decides who owns a code."""
        promotion = Promotion(
            promo_code=draft.promo_code,
            title=draft.title,
            description=draft.description,
            promotion_type=draft.promotion_type.value,
            value=draft.value,
            min_order_value=draft.min_order_value,
            max_discount_amount=draft.max_discount_amount,
            start_date=draft.start_date,
            end_date=draft.end_date,
            usage_limit=draft.usage_limit,
            usage_count=0,
            is_active=draft.is_active,
            created_at=now_utc,
            updated_at=now_utc,
        )
        try:
            # Savepoint keeps the caller's transaction usable after a duplicate.
            async with self._session.begin_nested():
                row = await PromotionsRepo.create(self._session, promotion=promotion)
        except IntegrityError as exc:
            if PROMO_CODE_UNIQUE_CONSTRAINT in str(exc.orig):
                raise PromotionCodeTakenError(draft.promo_code) from exc
            raise PromotionStoreError(str(exc)) from exc
        except SQLAlchemyError as exc:
            raise PromotionStoreError(str(exc)) from exc
        return snapshot_from_row(row)
