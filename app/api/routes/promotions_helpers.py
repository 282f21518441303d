from __future__ import annotations

from datetime import datetime

import structlog
from fastapi import HTTPException, Request

from app.core.config import get_settings
from app.promotions.status import derive_status
from app.promotions.types import PromotionRejection, PromotionSnapshot, ValidationResult
from app.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)

from .promotions_models import (
    PromotionErrorResponse,
    PromotionResponse,
    ValidationResultResponse,
)

logger = structlog.get_logger(__name__)

STORE_UNAVAILABLE_DETAIL = {"code": "E_PROMOTION_STORE_UNAVAILABLE"}


def _promotion_as_response(promotion: PromotionSnapshot, *, now_utc: datetime) -> PromotionResponse:
    return PromotionResponse(
        id=promotion.id,
        promo_code=promotion.promo_code,
        title=promotion.title,
        description=promotion.description,
        type=promotion.promotion_type.value,
        value=promotion.value,
        min_order_value=promotion.min_order_value,
        max_discount_amount=promotion.max_discount_amount,
        start_date=promotion.start_date,
        end_date=promotion.end_date,
        usage_limit=promotion.usage_limit,
        usage_count=promotion.usage_count,
        remaining_uses=promotion.remaining_uses,
        usage_percentage=promotion.usage_percentage,
        is_active=promotion.is_active,
        status=derive_status(promotion, now_utc).value,
        created_at=promotion.created_at,
        updated_at=promotion.updated_at,
    )


def _rejection_as_response(error: PromotionRejection) -> PromotionErrorResponse:
    return PromotionErrorResponse(
        kind=error.kind.value,
        detail=error.detail,
        status=None if error.status is None else error.status.value,
        starts_in_seconds=error.starts_in_seconds,
        min_order_value=error.min_order_value,
        shortfall=error.shortfall,
        usage_limit=error.usage_limit,
    )


def _result_as_response(result: ValidationResult, *, now_utc: datetime) -> ValidationResultResponse:
    return ValidationResultResponse(
        is_valid=result.is_valid,
        promotion=(
            None
            if result.promotion is None
            else _promotion_as_response(result.promotion, now_utc=now_utc)
        ),
        discount_amount=result.discount_amount,
        error=None if result.error is None else _rejection_as_response(result.error),
    )


def _store_unavailable(exc: Exception, *, operation: str) -> HTTPException:
    logger.error("promotion_store_unavailable", operation=operation, error=str(exc))
    return HTTPException(status_code=503, detail=STORE_UNAVAILABLE_DETAIL)


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(request, trusted_proxies=settings.internal_api_trusted_proxies)

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_promotions_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(request, expected_token=settings.internal_api_token):
        logger.warning(
            "internal_promotions_auth_failed",
            reason="invalid_credentials",
            client_ip=client_ip,
        )
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})
