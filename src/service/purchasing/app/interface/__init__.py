"""Application layer interfaces (Ports)"""

from src.service.purchasing.app.interface.i_gateway_error_policy import IGatewayErrorPolicy
from src.service.purchasing.app.interface.i_inventory_ledger import IInventoryLedger
from src.service.purchasing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.purchasing.app.interface.i_purchase_command_repo import IPurchaseCommandRepo
from src.service.purchasing.app.interface.i_purchase_query_repo import IPurchaseQueryRepo
from src.service.purchasing.app.interface.i_ticket_type_repo import ITicketTypeRepo

__all__ = [
    'IGatewayErrorPolicy',
    'IInventoryLedger',
    'IPaymentGateway',
    'IPurchaseCommandRepo',
    'IPurchaseQueryRepo',
    'ITicketTypeRepo',
]
