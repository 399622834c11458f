from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_gateway_error_policy import IGatewayErrorPolicy
from src.service.purchasing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.purchasing.driven_adapter.payment.http_payment_gateway_impl import (
    HttpPaymentGateway,
)
from src.service.purchasing.driven_adapter.payment.in_memory_payment_gateway_impl import (
    InMemoryPaymentGateway,
)


def build_payment_gateway(
    *, settings: Settings, error_policy: IGatewayErrorPolicy
) -> IPaymentGateway:
    webhook_secret = settings.PAYMENT_GATEWAY_WEBHOOK_SECRET.get_secret_value()

    if settings.PAYMENT_GATEWAY_BACKEND == 'http':
        Logger.base.info(f'💳 [GATEWAY] Using HTTP gateway at {settings.PAYMENT_GATEWAY_BASE_URL}')
        return HttpPaymentGateway(
            base_url=settings.PAYMENT_GATEWAY_BASE_URL,
            api_key=settings.PAYMENT_GATEWAY_API_KEY.get_secret_value(),
            webhook_secret=webhook_secret,
            timeout_seconds=settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
            error_policy=error_policy,
        )

    Logger.base.info('💳 [GATEWAY] Using in-memory gateway')
    return InMemoryPaymentGateway(
        webhook_secret=webhook_secret, checkout_base_url=settings.MOCK_CHECKOUT_BASE_URL
    )
