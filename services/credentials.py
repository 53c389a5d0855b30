# services/credentials.py
import asyncio
import logging

from pwdlib import PasswordHash

from db import Storage
from errors import DuplicateIdentity, InvalidCredentials, ValidationError
from models.user import Role, public_user

logger = logging.getLogger(__name__)

ROLES = {role.value for role in Role}


class CredentialStore:
    """
    使用者帳號與密碼的管理。

    密碼只存 Argon2 雜湊 (pwdlib 會自動加 salt)，資料庫裡永遠不會出現明碼。
    """

    def __init__(self, storage: Storage, password_hash: PasswordHash | None = None):
        self.storage = storage
        self.password_hash = password_hash or PasswordHash.recommended()
        self._dummy_hash: str | None = None

    async def register(self, name: str, email: str, raw_password: str, role: str) -> int:
        name = (name or "").strip()
        email = (email or "").strip().lower()

        # 步驟 1: 檢查欄位
        if not name or not email or not raw_password:
            raise ValidationError("name, email and password are required")
        # 防止前端亂送奇怪的角色
        if role not in ROLES:
            raise ValidationError(f"role must be one of: {', '.join(sorted(ROLES))}")

        # 步驟 2: 檢查重複
        if await self.storage.find_user_by_email(email) is not None:
            raise DuplicateIdentity()

        # 步驟 3: 寫入 (同時有人註冊同一個信箱時，唯一索引會擋下來)
        # Argon2 很吃 CPU，丟到 thread 執行避免卡住 event loop
        hashed = await asyncio.to_thread(self.password_hash.hash, raw_password)
        user_id = await self.storage.insert_user(name, email, hashed, role)
        logger.info("新使用者註冊 user_id=%s role=%s", user_id, role)
        return user_id

    async def verify(self, email: str, raw_password: str) -> int:
        email = (email or "").strip().lower()
        user = await self.storage.find_user_by_email(email)

        if user is None:
            # 找不到人也要跑一次雜湊比對，讓兩種失敗花的時間差不多
            await asyncio.to_thread(self._verify_against_dummy, raw_password or "")
            logger.info("登入失敗：未知的 email")
            raise InvalidCredentials()

        matched = await asyncio.to_thread(
            self.password_hash.verify, raw_password or "", user["hashed_password"]
        )
        if not matched:
            logger.info("登入失敗：密碼錯誤 user_id=%s", user["id"])
            raise InvalidCredentials()

        return user["id"]

    async def get_user(self, user_id: int) -> dict | None:
        return public_user(await self.storage.get_user(user_id))

    async def set_portfolio(self, user_id: int, path: str) -> bool:
        return await self.storage.set_user_portfolio(user_id, path)

    def _verify_against_dummy(self, raw_password: str) -> bool:
        if self._dummy_hash is None:
            self._dummy_hash = self.password_hash.hash("not-a-real-password")
        return self.password_hash.verify(raw_password, self._dummy_hash)
