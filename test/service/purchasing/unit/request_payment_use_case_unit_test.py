"""
Unit tests for RequestPaymentUseCase

Test Focus:
1. One payment request per purchase: stored sessions are reused
2. Transient gateway failures are retried with the same idempotency key
3. Terminal gateway refusals are not retried and leave the purchase pending
4. Ownership and status checks happen before the gateway is called
"""

from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.exception.exceptions import (
    ForbiddenError,
    GatewayRejectedError,
    GatewayUnavailableError,
    InvalidStateError,
    NotFoundError,
)
from src.service.purchasing.app.command.request_payment_use_case import RequestPaymentUseCase
from src.service.purchasing.domain.entity.purchase_entity import Purchase, PurchaseStatus
from src.service.purchasing.domain.value_object.payment import Payer, PaymentSession
from src.service.purchasing.driven_adapter.payment.in_memory_payment_gateway_impl import (
    InMemoryPaymentGateway,
)
from test.service.purchasing.fakes import FakeUnitOfWork
from test.test_constants import (
    TEST_BUYER_ID_1,
    TEST_BUYER_ID_2,
    TEST_PAYER_EMAIL,
    TEST_WEBHOOK_SECRET,
)


PAYER = Payer.from_contact(email=TEST_PAYER_EMAIL)


@pytest.mark.unit
class TestRequestPaymentUseCase:
    @pytest.fixture
    def gateway(self) -> InMemoryPaymentGateway:
        return InMemoryPaymentGateway(webhook_secret=TEST_WEBHOOK_SECRET)

    @pytest.fixture
    def mock_query_repo(self, pending_purchase: Purchase) -> AsyncMock:
        repo = AsyncMock()
        repo.get_by_id = AsyncMock(return_value=pending_purchase)
        return repo

    @pytest.fixture
    def use_case(
        self, fake_uow_factory, fake_uow: FakeUnitOfWork, mock_query_repo, gateway
    ) -> RequestPaymentUseCase:
        async def attach(*, purchase_id, session):
            return attrs.evolve(
                mock_query_repo.get_by_id.return_value,
                external_reference=session.external_reference,
                payment_url=session.hosted_url,
            )

        fake_uow.purchase_command_repo.attach_payment_session = AsyncMock(side_effect=attach)
        return RequestPaymentUseCase(
            uow_factory=fake_uow_factory,
            purchase_query_repo=mock_query_repo,
            payment_gateway=gateway,
            max_retries=2,
            retry_backoff_seconds=0,
        )

    @pytest.mark.asyncio
    async def test_creates_session_and_stores_it(
        self,
        use_case: RequestPaymentUseCase,
        fake_uow: FakeUnitOfWork,
        gateway: InMemoryPaymentGateway,
        pending_purchase: Purchase,
    ):
        """
        Given: Pending purchase without a payment session
        When: The buyer requests payment
        Then:
          - The gateway is called once, keyed by the purchase id
          - The session is stored and committed
          - The purchase stays pending
        """
        # Act
        session = await use_case.execute(
            purchase_id=pending_purchase.id, payer=PAYER, buyer_id=TEST_BUYER_ID_1
        )

        # Assert
        assert session.hosted_url.endswith(session.external_reference)
        assert gateway.external_request_count == 1
        fake_uow.purchase_command_repo.attach_payment_session.assert_awaited_once_with(
            purchase_id=pending_purchase.id, session=session
        )
        assert fake_uow.committed

    @pytest.mark.asyncio
    async def test_existing_session_is_reused_without_gateway_call(
        self,
        use_case: RequestPaymentUseCase,
        mock_query_repo: AsyncMock,
        gateway: InMemoryPaymentGateway,
        pending_purchase: Purchase,
    ):
        # Arrange
        mock_query_repo.get_by_id.return_value = attrs.evolve(
            pending_purchase, external_reference='mock_abc', payment_url='http://pay/mock_abc'
        )

        # Act
        session = await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)

        # Assert
        assert session == PaymentSession(
            hosted_url='http://pay/mock_abc', external_reference='mock_abc'
        )
        assert gateway.request_count == 0

    @pytest.mark.asyncio
    async def test_transient_failures_are_retried(
        self,
        use_case: RequestPaymentUseCase,
        gateway: InMemoryPaymentGateway,
        pending_purchase: Purchase,
    ):
        """
        Given: Gateway fails twice with a transient error
        When: The buyer requests payment
        Then: The third attempt succeeds and only one payment request exists
        """
        # Arrange
        gateway.fail_next(GatewayUnavailableError('503'), GatewayUnavailableError('timeout'))

        # Act
        session = await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)

        # Assert
        assert session.external_reference
        assert gateway.request_count == 3
        assert gateway.external_request_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(
        self,
        use_case: RequestPaymentUseCase,
        fake_uow: FakeUnitOfWork,
        gateway: InMemoryPaymentGateway,
        pending_purchase: Purchase,
    ):
        # Arrange
        gateway.fail_next(*[GatewayUnavailableError('down') for _ in range(3)])

        # Act & Assert
        with pytest.raises(GatewayUnavailableError):
            await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)

        assert gateway.request_count == 3
        fake_uow.purchase_command_repo.attach_payment_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejection_is_not_retried(
        self,
        use_case: RequestPaymentUseCase,
        fake_uow: FakeUnitOfWork,
        gateway: InMemoryPaymentGateway,
        pending_purchase: Purchase,
    ):
        # Arrange
        gateway.fail_next(GatewayRejectedError('card declined'))

        # Act & Assert
        with pytest.raises(GatewayRejectedError):
            await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)

        assert gateway.request_count == 1
        assert not fake_uow.committed

    @pytest.mark.asyncio
    async def test_lost_race_returns_stored_session(
        self,
        use_case: RequestPaymentUseCase,
        fake_uow: FakeUnitOfWork,
        pending_purchase: Purchase,
    ):
        """
        Given: A concurrent request stored its session first
        When: This request tries to attach its own
        Then: The stored session is returned instead
        """
        # Arrange
        stored = attrs.evolve(
            pending_purchase, external_reference='mock_first', payment_url='http://pay/mock_first'
        )
        fake_uow.purchase_command_repo.attach_payment_session = AsyncMock(return_value=None)
        fake_uow.purchase_command_repo.get_by_id = AsyncMock(return_value=stored)

        # Act
        session = await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)

        # Assert
        assert session.external_reference == 'mock_first'
        assert not fake_uow.committed

    @pytest.mark.asyncio
    async def test_purchase_paid_before_session_stored_returns_session(
        self,
        use_case: RequestPaymentUseCase,
        fake_uow: FakeUnitOfWork,
        pending_purchase: Purchase,
    ):
        """
        Given: The payment outcome was confirmed while the gateway call was in flight
        When: This request stores its session
        Then: The session is returned; the buyer is not told the payment failed
        """
        # Arrange
        async def attach(*, purchase_id, session):
            return attrs.evolve(
                pending_purchase.mark_as_paid(),
                external_reference=session.external_reference,
                payment_url=session.hosted_url,
            )

        fake_uow.purchase_command_repo.attach_payment_session = AsyncMock(side_effect=attach)

        # Act
        session = await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)

        # Assert
        assert session.external_reference.startswith('mock_')
        assert fake_uow.committed

    @pytest.mark.asyncio
    async def test_lost_race_on_paid_purchase_returns_stored_session(
        self,
        use_case: RequestPaymentUseCase,
        fake_uow: FakeUnitOfWork,
        pending_purchase: Purchase,
    ):
        # Arrange
        stored = attrs.evolve(
            pending_purchase.mark_as_paid(),
            external_reference='mock_first',
            payment_url='http://pay/mock_first',
        )
        fake_uow.purchase_command_repo.attach_payment_session = AsyncMock(return_value=None)
        fake_uow.purchase_command_repo.get_by_id = AsyncMock(return_value=stored)

        # Act
        session = await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)

        # Assert
        assert session.external_reference == 'mock_first'

    @pytest.mark.asyncio
    async def test_lost_race_to_cancel_raises(
        self,
        use_case: RequestPaymentUseCase,
        fake_uow: FakeUnitOfWork,
        pending_purchase: Purchase,
    ):
        fake_uow.purchase_command_repo.attach_payment_session = AsyncMock(return_value=None)
        fake_uow.purchase_command_repo.get_by_id = AsyncMock(
            return_value=pending_purchase.cancel()
        )

        with pytest.raises(InvalidStateError, match='cancelled'):
            await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)
        assert not fake_uow.committed

    @pytest.mark.asyncio
    async def test_other_buyer_forbidden(
        self, use_case: RequestPaymentUseCase, gateway, pending_purchase: Purchase
    ):
        with pytest.raises(ForbiddenError):
            await use_case.execute(
                purchase_id=pending_purchase.id, payer=PAYER, buyer_id=TEST_BUYER_ID_2
            )
        assert gateway.request_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status', [PurchaseStatus.PAID, PurchaseStatus.CANCELLED])
    async def test_only_pending_purchases_can_be_paid(
        self,
        use_case: RequestPaymentUseCase,
        mock_query_repo: AsyncMock,
        gateway: InMemoryPaymentGateway,
        pending_purchase: Purchase,
        status: PurchaseStatus,
    ):
        # Arrange
        mock_query_repo.get_by_id.return_value = attrs.evolve(pending_purchase, status=status)

        # Act & Assert
        with pytest.raises(InvalidStateError):
            await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)
        assert gateway.request_count == 0

    @pytest.mark.asyncio
    async def test_missing_purchase(
        self, use_case: RequestPaymentUseCase, mock_query_repo: AsyncMock, pending_purchase
    ):
        mock_query_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await use_case.execute(purchase_id=pending_purchase.id, payer=PAYER)
