from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import SessionLocal
from app.promotions.errors import PromotionStoreError
from app.promotions.service import ACTIVE_PROMOTIONS_LIMIT, PromotionService
from app.promotions.store import SqlPromotionStore

from .promotions_helpers import (
    _assert_internal_access,
    _promotion_as_response,
    _result_as_response,
    _store_unavailable,
)
from .promotions_models import (
    PromotionCheckRequest,
    PromotionListResponse,
    PromotionResponse,
    PromotionStatisticsResponse,
    ValidationResultResponse,
)

router = APIRouter(tags=["promotions"])


@router.post("/promotions/validate", response_model=ValidationResultResponse)
async def validate_promotion(payload: PromotionCheckRequest) -> ValidationResultResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal() as session:
            result = await PromotionService.validate(
                SqlPromotionStore(session),
                promo_code=payload.promo_code,
                order_value=payload.order_value,
                now_utc=now_utc,
            )
    except (PromotionStoreError, SQLAlchemyError) as exc:
        raise _store_unavailable(exc, operation="validate") from exc

    return _result_as_response(result, now_utc=now_utc)


@router.post("/promotions/redeem", response_model=ValidationResultResponse)
async def redeem_promotion(payload: PromotionCheckRequest) -> ValidationResultResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await PromotionService.redeem(
                SqlPromotionStore(session),
                promo_code=payload.promo_code,
                order_value=payload.order_value,
                now_utc=now_utc,
            )
    except (PromotionStoreError, SQLAlchemyError) as exc:
        raise _store_unavailable(exc, operation="redeem") from exc

    return _result_as_response(result, now_utc=now_utc)


@router.get("/promotions/active", response_model=PromotionListResponse)
async def list_active_promotions(
    limit: int = Query(default=ACTIVE_PROMOTIONS_LIMIT, ge=1, le=100),
) -> PromotionListResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal() as session:
            promotions = await PromotionService.list_active(
                SqlPromotionStore(session),
                now_utc=now_utc,
                limit=limit,
            )
    except (PromotionStoreError, SQLAlchemyError) as exc:
        raise _store_unavailable(exc, operation="list_active") from exc

    return PromotionListResponse(
        promotions=[_promotion_as_response(promotion, now_utc=now_utc) for promotion in promotions]
    )


@router.get("/promotions/code/{promo_code}", response_model=PromotionResponse)
async def get_promotion_by_code(promo_code: str) -> PromotionResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal() as session:
            promotion = await PromotionService.get_by_code(
                SqlPromotionStore(session),
                promo_code=promo_code,
            )
    except (PromotionStoreError, SQLAlchemyError) as exc:
        raise _store_unavailable(exc, operation="get_by_code") from exc

    if promotion is None:
        raise HTTPException(status_code=404, detail={"code": "E_PROMOTION_NOT_FOUND"})
    return _promotion_as_response(promotion, now_utc=now_utc)


@router.get("/promotions/{promotion_id:int}", response_model=PromotionResponse)
async def get_promotion_by_id(promotion_id: int) -> PromotionResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal() as session:
            promotion = await PromotionService.get_by_id(
                SqlPromotionStore(session),
                promotion_id=promotion_id,
            )
    except (PromotionStoreError, SQLAlchemyError) as exc:
        raise _store_unavailable(exc, operation="get_by_id") from exc

    if promotion is None:
        raise HTTPException(status_code=404, detail={"code": "E_PROMOTION_NOT_FOUND"})
    return _promotion_as_response(promotion, now_utc=now_utc)


@router.get("/promotions/statistics",response_model=PromotionStatisticsResponse)
async def get_promotion_statistics(request: Request) -> PromotionStatisticsResponse:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal() as session:
            stats = await PromotionService.statistics(SqlPromotionStore(session), now_utc=now_utc)
    except (PromotionStoreError, SQLAlchemyError) as exc:
        raise _store_unavailable(exc, operation="statistics") from exc

    return PromotionStatisticsResponse(
        generated_at=now_utc,
        total_promotions=stats.total_promotions,
        active_promotions=stats.active_promotions,
        expired_promotions=stats.expired_promotions,
        upcoming_promotions=stats.upcoming_promotions,
        inactive_promotions=stats.inactive_promotions,
        total_usage=stats.total_usage,
        average_percentage_value=stats.average_percentage_value,
        average_fixed_amount=stats.average_fixed_amount,
        average_discount=stats.average_percentage_value,
    )
