"""Integration tests for POST /checkout/create-session via TestClient."""

import asyncio
import threading

import httpx
import pytest
from checkout.api.routes import cart_router, checkout_router
from checkout.order.order import Order
from fastapi import FastAPI
from fastapi.testclient import TestClient
from payments.gateway import set_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import AuthorizationResult
from protean import current_domain
from protean.integrations.fastapi import register_exception_handlers

SHOPPER_HEADERS = {"X-User-Id": "user-1", "X-User-Email": "jean@example.com"}

CHECKOUT_BODY = {
    "shippingAddress": {
        "firstName": "Jean",
        "lastName": "Dupont",
        "street": "12 rue de la Paix",
        "city": "Paris",
        "postalCode": "75001",
        "country": "FR",
    },
    "carrier": {"carrier": "chronopost", "carrierName": "Chronopost", "price": 599, "estimatedDays": "1-2 jours"},
    "shippingMode": "HOME_DELIVERY",
}


@pytest.fixture()
def gateway():
    gateway = FakeGateway()
    set_gateway(gateway)
    return gateway


@pytest.fixture()
def client(gateway):
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(checkout_router)
    register_exception_handlers(app)
    return TestClient(app)


def _fill_cart(client):
    for product_id, price, quantity in (("prod-1", 2500, 2), ("prod-2", 4000, 1)):
        response = client.post(
            "/cart/items",
            json={
                "productId": product_id,
                "name": f"Product {product_id}",
                "price": price,
                "quantity": quantity,
                "creatorSlug": "atelier-lune",
            },
            headers={"X-User-Id": "user-1"},
        )
        assert response.status_code == 200


class TestCreateSession:
    def test_success_returns_client_secret_and_order(self, client, gateway):
        _fill_cart(client)

        response = client.post("/checkout/create-session", json=CHECKOUT_BODY, headers=SHOPPER_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"clientSecret", "orderId"}
        order = current_domain.repository_for(Order).get(data["orderId"])
        assert order.total_amount == 9599
        assert data["clientSecret"].startswith(order.payment_intent_id)
        assert gateway.calls[0]["amount_cents"] == 9599

    def test_cart_is_empty_afterwards(self, client):
        _fill_cart(client)
        client.post("/checkout/create-session", json=CHECKOUT_BODY, headers=SHOPPER_HEADERS)

        cart = client.get("/cart", headers={"X-User-Id": "user-1"}).json()
        assert cart["items"] == []
        assert cart["total"] == 0

    def test_client_snapshot_fallback(self, client, gateway):
        body = {
            **CHECKOUT_BODY,
            "items": [
                {"productId": "prod-1", "name": "Carnet A5", "price": 2500, "quantity": 2},
                {"productId": "prod-2", "name": "Affiche", "price": 4000, "quantity": 1},
            ],
        }

        response = client.post("/checkout/create-session", json=body, headers=SHOPPER_HEADERS)

        assert response.status_code == 200
        assert gateway.calls[0]["amount_cents"] == 9599

    def test_unauthenticated(self, client, gateway):
        response = client.post("/checkout/create-session", json=CHECKOUT_BODY)

        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"
        assert gateway.calls == []

    def test_malformed_json(self, client):
        response = client.post(
            "/checkout/create-session",
            content=b"{not json",
            headers={**SHOPPER_HEADERS, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    def test_validation_details(self, client):
        body = {**CHECKOUT_BODY, "shippingAddress": {**CHECKOUT_BODY["shippingAddress"], "postalCode": "ABC"}}

        response = client.post("/checkout/create-session", json=body, headers=SHOPPER_HEADERS)

        assert response.status_code == 400
        assert "shippingAddress.postalCode" in response.json()["details"]["fieldErrors"]

    def test_empty_cart(self, client, gateway):
        response = client.post("/checkout/create-session", json=CHECKOUT_BODY, headers=SHOPPER_HEADERS)

        assert response.status_code == 400
        assert response.json() == {"error": "Cart is empty", "code": "empty_cart", "retryable": True}
        assert gateway.calls == []

    def test_payment_failure(self, client, gateway):
        _fill_cart(client)
        gateway.configure(should_succeed=False, failure_reason="Your card was declined.")

        response = client.post("/checkout/create-session", json=CHECKOUT_BODY, headers=SHOPPER_HEADERS)

        assert response.status_code == 500
        assert response.json()["code"] == "payment_authorization_failed"
        assert "Your card was declined." in response.json()["error"]
        assert current_domain.repository_for(Order)._dao.query.all().items == []


class HeldGateway(FakeGateway):
    """Holds the authorization until the test releases it."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.released = threading.Event()
        self.released_while_held = False

    def authorize(self, amount_cents, currency, metadata, idempotency_key) -> AuthorizationResult:
        self.entered.set()
        self.released_while_held = self.released.wait(timeout=5)
        return super().authorize(amount_cents, currency, metadata, idempotency_key)


class TestSlowAuthorization:
    def test_other_requests_are_served_while_authorization_is_pending(self, client):
        _fill_cart(client)
        held = HeldGateway()
        set_gateway(held)

        app = FastAPI()
        app.include_router(cart_router)
        app.include_router(checkout_router)

        async def scenario():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as async_client:
                checkout = asyncio.create_task(
                    async_client.post("/checkout/create-session", json=CHECKOUT_BODY, headers=SHOPPER_HEADERS)
                )
                await asyncio.to_thread(held.entered.wait, 5)

                cart = await async_client.get("/cart", headers={"X-User-Id": "user-1"})
                held.released.set()
                return cart, await checkout

        cart, checkout = asyncio.run(scenario())

        assert cart.status_code == 200
        assert held.released_while_held is True
        assert checkout.status_code == 200
