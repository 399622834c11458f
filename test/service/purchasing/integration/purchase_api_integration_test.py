"""
Integration tests for the purchasing HTTP API

The app runs with its real routers, dependency wiring and exception handlers;
the container's database is swapped for a temporary SQLite file and the payment
gateway for the in-memory one.
"""

from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from pathlib import Path

from dependency_injector import providers
from fastapi import FastAPI, status
from fastapi.testclient import TestClient
import pytest

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import Database
from src.service.purchasing.driven_adapter.payment.in_memory_payment_gateway_impl import (
    InMemoryPaymentGateway,
)
from test.test_constants import (
    TEST_BUYER_ID_1,
    TEST_BUYER_ID_2,
    TEST_EVENT_ID_1,
    TEST_PAYER_EMAIL,
    TEST_PURCHASE_ID_999,
)


BUYER_1 = {'X-Buyer-Id': str(TEST_BUYER_ID_1)}
BUYER_2 = {'X-Buyer-Id': str(TEST_BUYER_ID_2)}


@asynccontextmanager
async def _test_lifespan(app: FastAPI) -> AsyncIterator[None]:
    container.wire(modules=WIRE_MODULES)
    database = container.database()
    await database.create_tables()
    yield
    await database.dispose()
    container.unwire()


@pytest.fixture
def client(
    tmp_path: Path, payment_gateway: InMemoryPaymentGateway
) -> Generator[TestClient, None, None]:
    container.reset_singletons()
    container.database.override(
        providers.Object(Database(database_url=f'sqlite+aiosqlite:///{tmp_path / "api.db"}'))
    )
    container.payment_gateway.override(providers.Object(payment_gateway))
    app = create_app(lifespan=_test_lifespan, title_suffix=' (Test)')
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        container.payment_gateway.reset_override()
        container.database.reset_override()
        container.reset_singletons()


@pytest.fixture
def concert(client: TestClient) -> dict[str, str]:
    ids = {}
    for name, price, capacity in [('Standard', 10, 100), ('VIP', 25, 10)]:
        response = client.post(
            f'/api/event/{TEST_EVENT_ID_1}/ticket_type',
            json={'name': name, 'price': price, 'total_capacity': capacity},
        )
        assert response.status_code == status.HTTP_201_CREATED
        ids[name] = response.json()['id']
    return ids


def _checkout(client: TestClient, concert: dict[str, str], headers=BUYER_1, vip_price: int = 25):
    return client.post(
        '/api/purchase',
        headers=headers,
        json={
            'event_id': str(TEST_EVENT_ID_1),
            'payment_method': 'card',
            'line_items': [
                {'ticket_type_id': concert['Standard'], 'quantity': 2, 'unit_price': 10},
                {'ticket_type_id': concert['VIP'], 'quantity': 1, 'unit_price': vip_price},
            ],
        },
    )


@pytest.mark.integration
class TestPurchaseApi:
    def test_full_purchase_journey(
        self, client: TestClient, concert: dict[str, str], payment_gateway: InMemoryPaymentGateway
    ):
        """
        Given: An event with Standard and VIP tickets
        When: A buyer checks out, pays through the gateway webhook and has a ticket scanned
        Then: Every step is reflected in the API responses
        """
        # Checkout
        response = _checkout(client, concert)
        assert response.status_code == status.HTTP_201_CREATED
        purchase = response.json()
        assert purchase['status'] == 'pending'
        assert purchase['total_price'] == 45

        availability = client.get(f'/api/event/{TEST_EVENT_ID_1}/availability').json()
        assert {row['name']: row['quantity_available'] for row in availability} == {
            'Standard': 98,
            'VIP': 9,
        }

        # Pending tickets are not listed as owned yet
        assert client.get('/api/ticket/my_ticket', headers=BUYER_1).json() == []

        # Payment request
        response = client.post(
            f'/api/purchase/{purchase["id"]}/pay', headers=BUYER_1, json={'email': TEST_PAYER_EMAIL}
        )
        assert response.status_code == status.HTTP_200_OK
        session = response.json()
        assert session['payment_url'].endswith(session['external_reference'])

        # Gateway callback
        outcome = payment_gateway.settle(external_reference=session['external_reference'])
        payload, headers = payment_gateway.build_webhook(outcome=outcome)
        response = client.post('/api/payment/webhook', content=payload, headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'paid'

        tickets = client.get('/api/ticket/my_ticket', headers=BUYER_1).json()
        assert len(tickets) == 3
        assert {t['status'] for t in tickets} == {'paid'}

        # Venue scan
        response = client.post(f'/api/ticket/{tickets[0]["id"]}/validate')
        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'validated'
        response = client.post(f'/api/ticket/{tickets[0]["id"]}/validate')
        assert response.status_code == status.HTTP_409_CONFLICT

        # Paid purchases cannot be cancelled
        response = client.patch(f'/api/purchase/{purchase["id"]}', headers=BUYER_1)
        assert response.status_code == status.HTTP_409_CONFLICT

        paid = client.get('/api/purchase/my_purchase?purchase_status=paid', headers=BUYER_1).json()
        assert [p['id'] for p in paid] == [purchase['id']]

    def test_cancel_pending_purchase(self, client: TestClient, concert: dict[str, str]):
        purchase_id = _checkout(client, concert).json()['id']

        response = client.patch(f'/api/purchase/{purchase_id}', headers=BUYER_1)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'cancelled'
        tickets = client.get(f'/api/purchase/{purchase_id}/tickets', headers=BUYER_1).json()
        assert {t['status'] for t in tickets} == {'cancelled'}
        availability = client.get(f'/api/event/{TEST_EVENT_ID_1}/availability').json()
        assert all(row['quantity_sold'] == 0 for row in availability)

    def test_sync_payment_polls_gateway(
        self, client: TestClient, concert: dict[str, str], payment_gateway: InMemoryPaymentGateway
    ):
        purchase_id = _checkout(client, concert).json()['id']
        session = client.post(
            f'/api/purchase/{purchase_id}/pay', headers=BUYER_1, json={'email': TEST_PAYER_EMAIL}
        ).json()
        payment_gateway.settle(external_reference=session['external_reference'])

        response = client.post(f'/api/purchase/{purchase_id}/sync_payment', headers=BUYER_1)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'paid'

    def test_mock_checkout_page_settles_payment(self, client: TestClient, concert: dict[str, str]):
        """
        Given: A payment session from the in-memory gateway
        When: The buyer opens the returned payment URL and completes checkout
        Then: The page shows the pending payment, and completing it pays the purchase
        """
        # Arrange
        purchase_id = _checkout(client, concert).json()['id']
        session = client.post(
            f'/api/purchase/{purchase_id}/pay', headers=BUYER_1, json={'email': TEST_PAYER_EMAIL}
        ).json()
        checkout_path = f'/api/payment/mockpay/{session["external_reference"]}'
        assert session['payment_url'].endswith(checkout_path)

        # Act
        page = client.get(checkout_path)
        completed = client.post(checkout_path)

        # Assert
        assert page.status_code == status.HTTP_200_OK
        assert page.json()['status'] == 'pending'
        assert page.json()['purchase_id'] == purchase_id
        assert page.json()['amount'] == 45
        assert completed.status_code == status.HTTP_200_OK
        assert completed.json()['status'] == 'paid'

    def test_mock_checkout_unknown_payment_is_not_found(self, client: TestClient):
        response = client.get('/api/payment/mockpay/mock_unknown')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_stale_price_is_conflict(self, client: TestClient, concert: dict[str, str]):
        response = _checkout(client, concert, vip_price=20)

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_sold_out_reports_ticket_type(self, client: TestClient):
        ticket_type_id = client.post(
            f'/api/event/{TEST_EVENT_ID_1}/ticket_type',
            json={'name': 'Backstage', 'price': 50, 'total_capacity': 1},
        ).json()['id']

        response = client.post(
            '/api/purchase',
            headers=BUYER_1,
            json={
                'event_id': str(TEST_EVENT_ID_1),
                'line_items': [
                    {'ticket_type_id': ticket_type_id, 'quantity': 2, 'unit_price': 50}
                ],
            },
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()['ticket_type_id'] == ticket_type_id

    def test_empty_cart_is_bad_request(self, client: TestClient):
        response = client.post(
            '/api/purchase',
            headers=BUYER_1,
            json={'event_id': str(TEST_EVENT_ID_1), 'line_items': []},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_missing_buyer_header_is_unauthorized(
        self, client: TestClient, concert: dict[str, str]
    ):
        response = _checkout(client, concert, headers={})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_other_buyer_cannot_see_or_cancel(self, client: TestClient, concert: dict[str, str]):
        purchase_id = _checkout(client, concert).json()['id']

        assert client.get(f'/api/purchase/{purchase_id}', headers=BUYER_2).status_code == 403
        assert client.patch(f'/api/purchase/{purchase_id}', headers=BUYER_2).status_code == 403

    def test_unknown_purchase_is_not_found(self, client: TestClient):
        response = client.get(f'/api/purchase/{TEST_PURCHASE_ID_999}', headers=BUYER_1)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_forged_webhook_is_rejected(self, client: TestClient):
        response = client.post(
            '/api/payment/webhook',
            content=b'{"type": "payment.approved", "externalReference": "mock_x"}',
            headers={'x-gateway-signature': 'forged'},
        )

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED

    def test_health(self, client: TestClient):
        assert client.get('/health').json()['status'] == 'healthy'
