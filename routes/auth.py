from fastapi import APIRouter, Depends, Header, status

from errors import TokenInvalid
from models.user import LoginRequest, RegisterRequest
from services import Services, get_services

# --- 1. 設定 Router ---
router = APIRouter()

# 前端把 token 放在這個自訂的 header 裡
AUTH_HEADER = "x-auth-token"


# --- 2. 核心依賴函式：取得當前登入者 ---
async def get_current_user(
    token: str | None = Header(None, alias=AUTH_HEADER),
    services: Services = Depends(get_services),
) -> dict:
    """
    驗證 token，回傳已登入的使用者資料 (dict)。

    運作原理：
    1. 從 header 取得 token。
    2. TokenIssuer 驗證簽章與到期時間，解出 user id。
    3. 用這個 id 去資料庫確認使用者真的存在。
    之後的 handler 直接拿這個 user 去呼叫各個元件。
    """
    user_id = services.tokens.verify(token)

    user = await services.credentials.get_user(user_id)
    if not user:
        # token 沒問題但找不到人 (可能帳號被刪除了)
        raise TokenInvalid("User no longer exists")
    return user


# --- 3. 註冊功能 ---
@router.post("/register", status_code=status.HTTP_201_CREATED)
async def handle_registration(body: RegisterRequest, services: Services = Depends(get_services)):
    await services.credentials.register(body.name, body.email, body.password, body.role)
    return {"message": "User registered successfully"}


# --- 4. 登入功能 ---
@router.post("/login")
async def handle_login(body: LoginRequest, services: Services = Depends(get_services)):
    """
    驗證帳號密碼，成功就發一張 24 小時有效的 token。
    """
    user_id = await services.credentials.verify(body.email, body.password)
    token = services.tokens.issue(user_id)
    user = await services.credentials.get_user(user_id)
    return {"token": token, "user": user}


# --- 5. 目前登入者 ---
@router.get("/me")
async def get_me(user: dict = Depends(get_current_user)):
    return user
