# AWB Stock - Data Layer
# ======================

from .database import Database, get_db
from .models import Airline, AWBStockItem
from .repositories import AirlineRepository, AWBStockRepository

__all__ = [
    # Database
    "Database",
    "get_db",
    # Models
    "Airline",
    "AWBStockItem",
    # Repositories
    "AirlineRepository",
    "AWBStockRepository",
]
