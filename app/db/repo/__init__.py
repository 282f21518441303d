from app.db.repo.promotions_repo import PromotionsRepo

__all__ = [
    "PromotionsRepo",
]
