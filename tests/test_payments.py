# tests/test_payments.py
import hashlib
import hmac

import pytest
import requests
from fastapi import status

from vendoriq.core.config import settings
from vendoriq.services import payment_service


@pytest.fixture
def razorpay(monkeypatch):
    monkeypatch.setattr(settings, "RAZORPAY_KEY_ID", "rzp_test_key")
    monkeypatch.setattr(settings, "RAZORPAY_KEY_SECRET", "rzp_test_secret")
    return settings


def sign(order_id, payment_id, secret="rzp_test_secret"):
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


def verify_payload(order_id="order_1", payment_id="pay_1", **extra):
    payload = {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": sign(order_id, payment_id),
    }
    payload.update(extra)
    return payload


class RazorpayOrders:
    """Serves one order from ``GET /orders/{id}``"""

    def __init__(self, order):
        self.order = order
        self.requested = []

    def get(self, url, auth, timeout):
        self.requested.append((url.rsplit("/", 1)[-1], auth))
        return FakeResponse(self.order)


@pytest.fixture
def paid_order(monkeypatch, test_user):
    orders = RazorpayOrders({
        "id": "order_1",
        "amount": 300000,
        "currency": "INR",
        "notes": {"user_id": test_user.id, "plan": "premium", "duration": "yearly"},
    })
    monkeypatch.setattr(payment_service.requests, "get", orders.get)
    return orders


class TestPayments:
    """Razorpay orders, signature checks and subscription activation"""

    def test_plan_amounts(self):
        assert payment_service.get_plan_amount("basic", "monthly") == 200
        assert payment_service.get_plan_amount("premium", "yearly") == 3000

    def test_create_order(self, client, auth_headers, razorpay, monkeypatch):
        sent = {}

        def fake_post(url, json, auth, timeout):
            sent.update(url=url, json=json, auth=auth)
            return FakeResponse({"id": "order_123", "amount": json["amount"], "currency": json["currency"]})

        monkeypatch.setattr(payment_service.requests, "post", fake_post)

        response = client.post(
            "/api/v1/payments/create-order", json={"plan": "basic", "duration": "monthly"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data == {"order_id": "order_123", "amount": 20000, "currency": "INR", "key_id": "rzp_test_key"}
        assert sent["url"].endswith("/orders")
        assert sent["auth"] == ("rzp_test_key", "rzp_test_secret")

    def test_create_order_gateway_error(self, client, auth_headers, razorpay, monkeypatch):
        monkeypatch.setattr(payment_service.requests, "post", lambda *a, **kw: FakeResponse({}, status_code=500))

        response = client.post(
            "/api/v1/payments/create-order", json={"plan": "basic", "duration": "monthly"}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_502_BAD_GATEWAY

    def test_invalid_plan(self, client, auth_headers, razorpay):
        response = client.post(
            "/api/v1/payments/create-order", json={"plan": "gold", "duration": "monthly"}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_gateway_not_configured(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "RAZORPAY_KEY_ID", None)

        response = client.post(
            "/api/v1/payments/create-order", json={"plan": "basic", "duration": "monthly"}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_signature_check(self, razorpay):
        signature = sign("order_1", "pay_1")

        assert payment_service.verify_payment_signature("order_1", "pay_1", signature)
        assert not payment_service.verify_payment_signature("order_1", "pay_2", signature)

    def test_verify_activates_plan_from_order(self, client, auth_headers, razorpay, paid_order, test_user, db_session):
        response = client.post("/api/v1/payments/verify", json=verify_payload(), headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["plan_name"] == "premium"
        assert data["amount"] == 3000
        assert paid_order.requested[0] == ("order_1", ("rzp_test_key", "rzp_test_secret"))
        db_session.refresh(test_user)
        assert test_user.subscription_status == "active"
        assert test_user.can_post_requests()

        listing = client.get("/api/v1/payments/subscriptions", headers=auth_headers)
        assert [s["payment_id"] for s in listing.json()["data"]] == ["pay_1"]

    def test_client_plan_fields_are_ignored(self, client, auth_headers, razorpay, paid_order):
        payload = verify_payload(plan="basic", duration="monthly")

        response = client.post("/api/v1/payments/verify", json=payload, headers=auth_headers)

        assert response.json()["data"]["plan_name"] == "premium"
        assert response.json()["data"]["amount"] == 3000

    def test_verify_rejects_reused_payment(self, client, auth_headers, razorpay, paid_order):
        first = client.post("/api/v1/payments/verify", json=verify_payload(), headers=auth_headers)
        second = client.post("/api/v1/payments/verify", json=verify_payload(), headers=auth_headers)

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_400_BAD_REQUEST
        assert second.json()["detail"] == "Payment already processed"
        listing = client.get("/api/v1/payments/subscriptions", headers=auth_headers)
        assert len(listing.json()["data"]) == 1

    def test_verify_rejects_order_of_another_user(self, client, auth_headers, razorpay, paid_order, test_user):
        paid_order.order["notes"]["user_id"] = "someone-else"

        response = client.post("/api/v1/payments/verify", json=verify_payload(), headers=auth_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert test_user.subscription_status == "trial"

    def test_verify_rejects_amount_mismatch(self, client, auth_headers, razorpay, paid_order):
        paid_order.order["amount"] = 100

        response = client.post("/api/v1/payments/verify", json=verify_payload(), headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_verify_order_lookup_failure(self, client, auth_headers, razorpay, monkeypatch):
        monkeypatch.setattr(payment_service.requests, "get", lambda *a, **kw: FakeResponse({}, status_code=500))

        response = client.post("/api/v1/payments/verify", json=verify_payload(), headers=auth_headers)

        assert response.status_code == status.HTTP_502_BAD_GATEWAY

    def test_verify_rejects_bad_signature(self, client, auth_headers, razorpay, paid_order, test_user):
        payload = verify_payload()
        payload["razorpay_signature"] = sign("order_1", "pay_1", secret="someone-else")

        response = client.post("/api/v1/payments/verify", json=payload, headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert test_user.subscription_status == "trial"
        assert paid_order.requested == []
