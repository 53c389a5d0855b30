# services/__init__.py
from dataclasses import dataclass

from fastapi import Request

from config import Settings
from db import Storage
from services.bids import BidLedger
from services.credentials import CredentialStore
from services.jobs import JobCatalog
from services.payments import PaymentRelay
from services.tokens import TokenIssuer


@dataclass
class Services:
    credentials: CredentialStore
    tokens: TokenIssuer
    jobs: JobCatalog
    bids: BidLedger
    payments: PaymentRelay


def build_services(storage: Storage, settings: Settings) -> Services:
    """所有元件共用同一個 storage，啟動時建立一次。"""
    return Services(
        credentials=CredentialStore(storage),
        tokens=TokenIssuer(settings.jwt_secret),
        jobs=JobCatalog(storage),
        bids=BidLedger(storage),
        payments=PaymentRelay(settings.stripe_secret_key, settings.payment_currency),
    )


def get_services(request: Request) -> Services:
    """FastAPI 的 Dependency：取得 lifespan 裡建立好的元件。"""
    return request.app.state.services


__all__ = [
    "Services",
    "build_services",
    "get_services",
    "BidLedger",
    "CredentialStore",
    "JobCatalog",
    "PaymentRelay",
    "TokenIssuer",
]
