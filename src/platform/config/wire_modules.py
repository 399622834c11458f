"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.purchasing.app.command import (
    cancel_purchase_use_case,
    confirm_payment_use_case,
    create_purchase_use_case,
    create_ticket_type_use_case,
    expire_pending_purchases_use_case,
    request_payment_use_case,
    validate_ticket_use_case,
)
from src.service.purchasing.app.query import (
    get_purchase_use_case,
    get_ticket_availability_use_case,
    list_purchases_for_buyer_use_case,
    list_tickets_for_buyer_use_case,
    list_tickets_for_purchase_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    create_purchase_use_case,
    request_payment_use_case,
    confirm_payment_use_case,
    cancel_purchase_use_case,
    validate_ticket_use_case,
    expire_pending_purchases_use_case,
    create_ticket_type_use_case,
    get_purchase_use_case,
    list_purchases_for_buyer_use_case,
    list_tickets_for_purchase_use_case,
    list_tickets_for_buyer_use_case,
    get_ticket_availability_use_case,
]
