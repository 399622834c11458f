from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import (
    CustomBaseError,
    GatewayUnavailableError,
    OutOfStockError,
)

# Type alias for exception handlers (compatible with Starlette's expected signature)
ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


async def custom_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, CustomBaseError) else CustomBaseError(str(exc))
    return JSONResponse(status_code=error.status_code, content={'detail': error.message})


async def out_of_stock_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, OutOfStockError):
        return await custom_error_handler(request, exc)
    content: dict[str, Any] = {'detail': exc.message}
    if exc.ticket_type_id is not None:
        content['ticket_type_id'] = str(exc.ticket_type_id)
    return JSONResponse(status_code=exc.status_code, content=content)


async def gateway_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    response = await custom_error_handler(request, exc)
    # Whole seconds; clients retry requestPayment with the same purchase id
    response.headers['Retry-After'] = str(
        max(1, round(settings.PAYMENT_GATEWAY_RETRY_BACKOFF_SECONDS))
    )
    return response


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={'detail': str(exc)})


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, RequestValidationError) else RequestValidationError([])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': error.errors()},
    )


async def general_500_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Internal server error'},
    )


# Starlette resolves the most specific class first
EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    OutOfStockError: out_of_stock_handler,
    GatewayUnavailableError: gateway_unavailable_handler,
    CustomBaseError: custom_error_handler,
    ValueError: value_error_handler,
    RequestValidationError: validation_error_handler,
    Exception: general_500_exception_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
