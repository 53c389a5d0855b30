from __future__ import annotations

import pytest
import stripe

from errors import ProcessorError, ValidationError
from services.payments import PaymentRelay, to_minor_units


@pytest.fixture
def captured(monkeypatch):
    calls = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return {"id": "pi_123", "status": "succeeded", "amount": kwargs["amount"]}

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    return calls


@pytest.mark.parametrize("amount,expected", [(10, 1000), (19.99, 1999), (0.1, 10), (1.005, 100)])
def test_to_minor_units(amount, expected):
    assert to_minor_units(amount) == expected


@pytest.mark.asyncio
async def test_charge_relays_processor_result(captured):
    relay = PaymentRelay("sk_test_dummy", currency="usd")
    result = await relay.charge(3, 25.5, "pm_card_visa")

    assert result == {"id": "pi_123", "status": "succeeded", "amount": 2550}
    assert len(captured) == 1
    call = captured[0]
    assert call["amount"] == 2550
    assert call["currency"] == "usd"
    assert call["payment_method"] == "pm_card_visa"
    assert call["confirm"] is True
    assert call["api_key"] == "sk_test_dummy"
    assert call["metadata"] == {"user_id": "3"}


@pytest.mark.asyncio
async def test_processor_failure_becomes_processor_error(monkeypatch):
    def declined(**kwargs):
        raise stripe.CardError("Your card was declined.", None, "card_declined")

    monkeypatch.setattr(stripe.PaymentIntent, "create", declined)

    with pytest.raises(ProcessorError) as exc:
        await PaymentRelay("sk_test_dummy").charge(1, 10, "pm_card_chargeDeclined")
    assert "declined" in str(exc.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "amount,method",
    [(0, "pm_x"), (-3, "pm_x"), (10, ""), (float("inf"), "pm_x"), (float("nan"), "pm_x"), (True, "pm_x")],
)
async def test_charge_validation(captured, amount, method):
    with pytest.raises(ValidationError):
        await PaymentRelay("sk_test_dummy").charge(1, amount, method)
    assert captured == []
