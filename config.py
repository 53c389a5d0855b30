# config.py
import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

# 讀取專案根目錄的 .env (如果有的話)，正式環境直接用環境變數即可
load_dotenv()

# 預設連線字串，格式與 psycopg 的 conninfo 相同
DEFAULT_DATABASE_URL = "dbname=freelance_market user=postgres host=localhost port=5432"


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """
    整個服務的設定值，只在啟動時讀取一次 (不支援熱更新)。
    """
    database_url: str = DEFAULT_DATABASE_URL
    storage_backend: str = "postgres"  # postgres 或 memory
    jwt_secret: str = "dev_secret_please_change_me"
    stripe_secret_key: str = ""
    payment_currency: str = "usd"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    upload_root: str = "uploads"
    port: int = 5000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            storage_backend=os.getenv("STORAGE_BACKEND", "postgres").strip().lower(),
            jwt_secret=os.getenv("JWT_SECRET", "dev_secret_please_change_me"),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", ""),
            payment_currency=os.getenv("PAYMENT_CURRENCY", "usd").lower(),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")),
            upload_root=os.getenv("UPLOAD_ROOT", "uploads"),
            port=int(os.getenv("PORT", "5000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
