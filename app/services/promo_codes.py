from __future__ import annotations

import re

from app.promotions.constants import PROMO_CODE_MAX_LENGTH, PROMO_CODE_MIN_LENGTH

_PROMO_CODE_PATTERN = re.compile(r"^[A-Z0-9_]+$")


def normalize_promo_code(raw_code: str) -> str:
    return raw_code.strip().upper()


def is_well_formed_promo_code(raw_code: str) -> bool:
    normalized = normalize_promo_code(raw_code)
    if not PROMO_CODE_MIN_LENGTH <= len(normalized) <= PROMO_CODE_MAX_LENGTH:
        return False
    return _PROMO_CODE_PATTERN.fullmatch(normalized) is not None
