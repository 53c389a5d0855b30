from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from routes.auth import get_current_user
from services import Services, get_services

router = APIRouter()


class PayRequest(BaseModel):
    amount: float = Field(allow_inf_nan=False)
    paymentMethodId: str


@router.post("/pay")
async def handle_pay(
    body: PayRequest,
    user: dict = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """
    付款：轉交給 Stripe，成功就把 PaymentIntent 原樣回傳。
    """
    intent = await services.payments.charge(user["id"], body.amount, body.paymentMethodId)
    return {"success": True, "paymentIntent": intent}
