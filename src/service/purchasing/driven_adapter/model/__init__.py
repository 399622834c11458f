"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.purchasing.driven_adapter.model.purchase_model import PurchaseModel
from src.service.purchasing.driven_adapter.model.ticket_model import TicketModel
from src.service.purchasing.driven_adapter.model.ticket_type_model import TicketTypeModel

__all__ = [
    'PurchaseModel',
    'TicketModel',
    'TicketTypeModel',
]
