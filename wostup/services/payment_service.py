"""
Payment Service - plan purchase orders and Razorpay-style signature checks.

Flow:
    create_order(plan)  -> order document with the plan price
    checkout happens in the browser
    verify_payment(...) -> HMAC-SHA256(key_secret, "<order_id>|<payment_id>")
                           must equal the signature; the plan is then activated

FREE is activated immediately without an order. ENTERPRISE is sold offline.
"""

import hashlib
import hmac
import logging
import secrets

from pymongo.collection import Collection
from pymongo import ReturnDocument

from wostup.core.config import get_settings
from wostup.core.errors import BadRequestException, NotFoundException
from wostup.core.plans import PlanName, PLAN_PRICES
from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.services.mongo_service import utcnow
from wostup.services.profile_service import StartupProfileService

logger = logging.getLogger(__name__)


def payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signature_matches(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    return hmac.compare_digest(payment_signature(order_id, payment_id, secret), signature)


def parse_plan(plan_type: str) -> PlanName:
    try:
        return PlanName(plan_type)
    except ValueError:
        raise BadRequestException(f"Unknown plan: {plan_type}")


class PaymentService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["payment_orders"])
        self.settings = get_settings()

    def create_order(self, startup_id: str, plan: PlanName) -> dict:
        price = PLAN_PRICES[plan]
        if price is None:
            raise BadRequestException(f"The {plan.value} plan is arranged with our sales team")

        if price == 0:
            StartupProfileService().set_plan(startup_id, plan)
            logger.info("Startup %s switched to %s", startup_id, plan.value)
            return {"planType": plan.value, "amount": 0, "activated": True}

        now = utcnow()
        order = {
            "orderId": f"order_{secrets.token_hex(8)}",
            "startupId": startup_id,
            "planType": plan.value,
            "amount": price,
            "currency": self.settings.currency,
            "status": "created",
            "paymentId": None,
            "createdAt": now,
            "updatedAt": now,
        }
        self.collection.insert_one(order)
        return {
            "orderId": order["orderId"],
            "amount": price,
            "currency": order["currency"],
            "planType": plan.value,
            "keyId": self.settings.razorpay_key_id,
            "activated": False,
        }

    def verify_payment(self, startup_id: str, order_id: str, payment_id: str, signature: str) -> dict:
        order = self.collection.find_one({"orderId": order_id, "startupId": startup_id})
        if not order:
            raise NotFoundException("Order not found")

        if order["status"] == "paid":
            if order["paymentId"] != payment_id:
                raise BadRequestException("Payment verification failed")
            return {"planType": order["planType"], "activated": True}

        if not signature_matches(order_id, payment_id, signature, self.settings.razorpay_key_secret):
            logger.warning("Signature mismatch for order %s", order_id)
            raise BadRequestException("Payment verification failed")

        updated = self.collection.find_one_and_update(
            {"_id": order["_id"], "status": "created"},
            {"$set": {"status": "paid", "paymentId": payment_id, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise BadRequestException("Payment verification failed")

        StartupProfileService().set_plan(startup_id, PlanName(order["planType"]))
        logger.info("Order %s paid, startup %s now on %s", order_id, startup_id, order["planType"])
        return {"planType": order["planType"], "activated": True}
