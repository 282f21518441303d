from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.promotions import Promotion


def _status_bucket(now_utc: datetime):
    return case(
        (Promotion.is_active.is_(False), "inactive"),
        (Promotion.start_date > now_utc, "upcoming"),
        (and_(Promotion.end_date.is_not(None), Promotion.end_date < now_utc), "expired"),
        else_="active",
    )


class PromotionsRepo:
    @staticmethod
    async def get_by_code(session: AsyncSession, promo_code: str) -> Promotion | None:
        stmt = select(Promotion).where(Promotion.promo_code == promo_code)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_id(session: AsyncSession, promotion_id: int) -> Promotion | None:
        return await session.get(Promotion, promotion_id)

    @staticmethod
    async def create(session: AsyncSession, *, promotion: Promotion) -> Promotion:
        session.add(promotion)
        await session.flush()
        return promotion

    @staticmethod
    async def increment_usage_if_below_limit(
        session: AsyncSession,
        *,
        promotion_id: int,
        now_utc: datetime,
    ) -> int | None:
        """Consume one usage slot in a single conditional UPDATE.

        Returns the new usage count, or None when the limit was already reached
        (or the row is gone). Concurrent callers serialise on the row lock and
        re-check the WHERE clause against the committed count.
        """
        stmt = (
            update(Promotion)
            .where(
                Promotion.id == promotion_id,
                or_(
                    Promotion.usage_limit.is_(None),
                    Promotion.usage_count < Promotion.usage_limit,
                ),
            )
            .values(usage_count=Promotion.usage_count + 1, updated_at=now_utc)
            .returning(Promotion.usage_count)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_usable(
        session: AsyncSession,
        *,
        now_utc: datetime,
        limit: int = 50,
    ) -> list[Promotion]:
        stmt = (
            select(Promotion)
            .where(
                Promotion.is_active.is_(True),
                Promotion.start_date <= now_utc,
                or_(Promotion.end_date.is_(None), Promotion.end_date >= now_utc),
                or_(
                    Promotion.usage_limit.is_(None),
                    Promotion.usage_count < Promotion.usage_limit,
                ),
            )
            .order_by(Promotion.start_date.desc(), Promotion.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def count_by_status(session: AsyncSession, *, now_utc: datetime) -> dict[str, int]:
        # Bucket in a subquery: grouping by the CASE itself would bind now_utc twice.
        buckets = select(_status_bucket(now_utc).label("status")).subquery()
        stmt = select(buckets.c.status, func.count()).group_by(buckets.c.status)
        result = await session.execute(stmt)
        return {str(status): int(count) for status, count in result.all()}

    @staticmethod
    async def sum_usage(session: AsyncSession) -> int:
        stmt = select(func.coalesce(func.sum(Promotion.usage_count), 0))
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def average_value_by_type(session: AsyncSession) -> dict[str, Decimal]:
        stmt = select(Promotion.promotion_type, func.avg(Promotion.value)).group_by(
            Promotion.promotion_type
        )
        result = await session.execute(stmt)
        return {
            str(promotion_type): Decimal(average)
            for promotion_type, average in result.all()
            if average is not None
        }
