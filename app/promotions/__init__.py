from app.promotions.service import PromotionService

__all__ = ["PromotionService"]
