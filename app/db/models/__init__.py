from app.db.models.base import Base
from app.db.models.promotions import Promotion

__all__ = [
    "Base",
    "Promotion",
]
