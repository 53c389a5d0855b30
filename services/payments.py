# services/payments.py
import asyncio
import logging

import stripe

from errors import ProcessorError, ValidationError
from utils import is_positive_number

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    # 金額換成最小貨幣單位 (美元 -> 美分)
    return int(round(amount * 100))


class PaymentRelay:
    """
    付款直接轉交給 Stripe，Stripe 回什麼就原封不動回傳什麼。
    本地不記帳、沒有 idempotency key、失敗也不重試。
    """

    def __init__(self, secret_key: str, currency: str = "usd"):
        self.secret_key = secret_key
        self.currency = currency

    async def charge(self, user_id: int, amount: float, payment_method_ref: str):
        if not is_positive_number(amount):
            raise ValidationError("amount must be a positive number")
        if not payment_method_ref:
            raise ValidationError("paymentMethodId is required")

        amount_minor = to_minor_units(amount)
        logger.info("建立付款 user_id=%s amount=%s %s", user_id, amount_minor, self.currency)

        def _create():
            return stripe.PaymentIntent.create(
                api_key=self.secret_key,
                amount=amount_minor,
                currency=self.currency,
                payment_method=payment_method_ref,
                payment_method_types=["card"],
                confirm=True,
                metadata={"user_id": str(user_id)},
            )

        try:
            # Stripe SDK 是同步的，丟到 thread 執行
            intent = await asyncio.to_thread(_create)
        except stripe.StripeError as e:
            message = e.user_message or str(e)
            logger.error("Stripe 付款失敗 user_id=%s: %s", user_id, message)
            raise ProcessorError(message) from e

        return intent
