import pytest

from app.services.promo_codes import is_well_formed_promo_code, normalize_promo_code


def test_normalize_promo_code_trims_and_uppercases() -> None:
    assert normalize_promo_code("  tet_sale50 ") == "TET_SALE50"


@pytest.mark.parametrize("raw_code", ["GIFT10", "gift_10", " abc ", "A" * 20])
def test_well_formed_codes(raw_code: str) -> None:
    assert is_well_formed_promo_code(raw_code) is True


@pytest.mark.parametrize("raw_code", ["", "AB", "A" * 21, "GIFT-10", "GIFT 10", "QUÀ10"])
def test_malformed_codes(raw_code: str) -> None:
    assert is_well_formed_promo_code(raw_code) is False
