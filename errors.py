# errors.py
# 統一的錯誤類別：各個元件丟出這些例外，main.py 再轉成對應的 HTTP 狀態碼


class MarketplaceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ValidationError(MarketplaceError):
    status_code = 400
    default_message = "Invalid input"


class InvalidCredentials(MarketplaceError):
    status_code = 401
    default_message = "Invalid email or password"


class TokenInvalid(MarketplaceError):
    status_code = 401
    default_message = "Invalid token"


class TokenExpired(MarketplaceError):
    status_code = 401
    default_message = "Token has expired"


class NotFound(MarketplaceError):
    status_code = 404
    default_message = "Not found"


class DuplicateIdentity(MarketplaceError):
    status_code = 409
    default_message = "Email is already registered"


class Conflict(MarketplaceError):
    # 樂觀鎖版本不符：別人比你先寫入了
    status_code = 409
    default_message = "Concurrent update detected, please retry"


class ProcessorError(MarketplaceError):
    status_code = 502
    default_message = "Payment processor error"


class StorageError(MarketplaceError):
    status_code = 503
    default_message = "Storage is unavailable"
