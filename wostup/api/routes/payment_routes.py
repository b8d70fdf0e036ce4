"""
Plan & Payment Routes

GET  /plans                   - Plan tiers, prices and features
POST /payment/create-order    - Start a plan purchase (FREE activates directly)
POST /payment/verify-payment  - Check the checkout signature and activate the plan
"""

from fastapi import APIRouter, Depends

from wostup.core import plans
from wostup.core.auth import get_current_startup
from wostup.core.config import get_settings
from wostup.schemas.schemas import CreateOrderRequest, VerifyPaymentRequest, ApiResponse
from wostup.services.payment_service import PaymentService, parse_plan

router = APIRouter(tags=["Plans & Payments"])


@router.get("/plans", response_model=ApiResponse[list])
async def list_plans():
    currency = get_settings().currency
    data = [
        {
            "planType": plan.value,
            "price": plans.PLAN_PRICES[plan],
            "currency": currency,
            "features": plans.get_features(plan.value),
        }
        for plan in plans.PlanName
    ]
    return ApiResponse(data=data, count=len(data))


@router.post("/payment/create-order", response_model=ApiResponse[dict])
async def create_order(request: CreateOrderRequest, startup: dict = Depends(get_current_startup)):
    plan = parse_plan(request.planType)
    order = PaymentService().create_order(startup["startup_id"], plan)
    return ApiResponse(data=order)


@router.post("/payment/verify-payment", response_model=ApiResponse[dict])
async def verify_payment(request: VerifyPaymentRequest, startup: dict = Depends(get_current_startup)):
    """
    Razorpay-style checkout verification:
    HMAC-SHA256(key_secret, "<order_id>|<payment_id>") == razorpay_signature
    """
    result = PaymentService().verify_payment(
        startup["startup_id"],
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
    )
    return ApiResponse(data=result, message="Plan activated")
