from decimal import Decimal

DEFAULT_CURRENCY_QUANTUM = Decimal("1")
PERCENT_BASE = Decimal("100")
MAX_PERCENTAGE_VALUE = Decimal("100")

PROMO_CODE_MIN_LENGTH = 3
PROMO_CODE_MAX_LENGTH = 20
TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 500
