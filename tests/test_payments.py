import hashlib
import hmac

from wostup.core.config import get_settings
from wostup.services.payment_service import payment_signature, signature_matches

SECRET = "test-razorpay-secret"


def sign(order_id: str, payment_id: str) -> str:
    return hmac.new(SECRET.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


def test_signature_is_hmac_sha256_of_order_and_payment():
    assert payment_signature("order_1", "pay_1", SECRET) == sign("order_1", "pay_1")
    assert signature_matches("order_1", "pay_1", sign("order_1", "pay_1"), SECRET)
    assert not signature_matches("order_1", "pay_2", sign("order_1", "pay_1"), SECRET)


def test_settings_use_test_secret():
    assert get_settings().razorpay_key_secret == SECRET


def test_paid_plan_checkout(client, db, make_startup):
    startup = make_startup()
    r = client.post("/api/payment/create-order", json={"planType": "growth"}, headers=startup["headers"])
    assert r.status_code == 200
    order = r.json()["data"]
    assert order["planType"] == "GROWTH"
    assert order["amount"] == 4900
    assert order["activated"] is False
    assert order["orderId"].startswith("order_")

    body = {
        "razorpay_order_id": order["orderId"],
        "razorpay_payment_id": "pay_123",
        "razorpay_signature": "0" * 64,
    }
    r = client.post("/api/payment/verify-payment", json=body, headers=startup["headers"])
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Payment verification failed"}
    me = client.get("/api/startupProfile/me/plan", headers=startup["headers"]).json()["data"]
    assert me["planType"] == "FREE"

    body["razorpay_signature"] = sign(order["orderId"], "pay_123")
    r = client.post("/api/payment/verify-payment", json=body, headers=startup["headers"])
    assert r.status_code == 200
    assert r.json()["data"] == {"planType": "GROWTH", "activated": True}
    me = client.get("/api/startupProfile/me/plan", headers=startup["headers"]).json()["data"]
    assert me["planType"] == "GROWTH"
    assert me["selected"] is True

    # Verifying the same payment again is harmless
    r = client.post("/api/payment/verify-payment", json=body, headers=startup["headers"])
    assert r.status_code == 200
    assert db.payment_orders.find_one({"orderId": order["orderId"]})["status"] == "paid"


def test_free_plan_activates_without_payment(client, make_startup):
    startup = make_startup()
    r = client.post("/api/payment/create-order", json={"planType": "FREE"}, headers=startup["headers"])
    assert r.json()["data"]["activated"] is True
    me = client.get("/api/startupProfile/me/plan", headers=startup["headers"]).json()["data"]
    assert me["selected"] is True


def test_enterprise_and_unknown_plans_are_rejected(client, make_startup):
    startup = make_startup()
    for plan in ("ENTERPRISE", "GOLD"):
        r = client.post("/api/payment/create-order", json={"planType": plan}, headers=startup["headers"])
        assert r.status_code == 400


def test_orders_belong_to_their_startup(client, make_startup):
    buyer = make_startup(name="Buyer")
    other = make_startup(name="Other")
    order = client.post("/api/payment/create-order", json={"planType": "PRO"},
                        headers=buyer["headers"]).json()["data"]

    body = {
        "razorpay_order_id": order["orderId"],
        "razorpay_payment_id": "pay_9",
        "razorpay_signature": sign(order["orderId"], "pay_9"),
    }
    r = client.post("/api/payment/verify-payment", json=body, headers=other["headers"])
    assert r.status_code == 404
