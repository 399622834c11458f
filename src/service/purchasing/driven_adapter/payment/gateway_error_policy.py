from typing import Optional

import httpx

from src.platform.exception.exceptions import (
    CustomBaseError,
    GatewayRejectedError,
    GatewayUnavailableError,
)
from src.service.purchasing.app.interface.i_gateway_error_policy import IGatewayErrorPolicy


RETRYABLE_STATUS_CODES = frozenset({408, 425, 429})


class DefaultGatewayErrorPolicy(IGatewayErrorPolicy):
    """
    Transport errors, timeouts, 408/425/429 and 5xx are transient;
    every other 4xx (including 401/403 credential failures) is terminal.
    """

    def classify_status(self, *, status_code: int, detail: Optional[str] = None) -> CustomBaseError:
        message = f'Payment gateway responded {status_code}'
        if detail:
            message = f'{message}: {detail}'

        if status_code >= 500 or status_code in RETRYABLE_STATUS_CODES:
            return GatewayUnavailableError(message)
        return GatewayRejectedError(message)

    def classify_transport_error(self, *, error: Exception) -> CustomBaseError:
        if isinstance(error, httpx.TimeoutException):
            return GatewayUnavailableError('Payment gateway timed out')
        return GatewayUnavailableError(f'Payment gateway unreachable: {type(error).__name__}')
