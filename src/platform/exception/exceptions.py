class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class InvalidStateError(ConflictError):
    """Operation not permitted in the current purchase or ticket status."""


class OutOfStockError(ConflictError):
    """Inventory exhausted at reservation time."""

    def __init__(self, message: str, *, ticket_type_id: object = None) -> None:
        super().__init__(message)
        self.ticket_type_id = ticket_type_id


class PriceMismatchError(ConflictError):
    """Cart price differs from the authoritative ticket type price."""


class PaymentMismatchError(ConflictError):
    """Gateway outcome does not belong to, or does not cover, the purchase."""


class GatewayUnavailableError(CustomBaseError):
    """Transient gateway failure - safe to retry with the same idempotency key."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class GatewayRejectedError(CustomBaseError):
    """Terminal gateway refusal - the purchase stays pending."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 402)
