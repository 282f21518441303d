class PromotionError(Exception):
    pass


class PromotionStoreError(PromotionError):
    """The promotion store could not be read or written."""


class PromotionCodeTakenError(PromotionError):
    pass
