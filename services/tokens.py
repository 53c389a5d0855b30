# services/tokens.py
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from errors import TokenExpired, TokenInvalid

TOKEN_TTL = timedelta(hours=24)
ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """
    簽發與驗證登入用的 JWT。
    Token 只帶 user id 與到期時間 (固定 24 小時)，沒有撤銷機制。
    """

    def __init__(self, secret: str, ttl: timedelta = TOKEN_TTL, clock: Callable[[], datetime] = _utcnow):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self.secret = secret
        self.ttl = ttl
        self.clock = clock

    def issue(self, user_id: int) -> str:
        now = self.clock()
        payload = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> int:
        if not token:
            raise TokenInvalid("Missing token")
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired() from e
        except jwt.InvalidTokenError as e:
            raise TokenInvalid() from e

        try:
            return int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise TokenInvalid() from e
