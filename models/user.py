# models/user.py
from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    FREELANCER = "freelancer"
    CLIENT = "client"


# --- 前端傳來的資料格式 ---
class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    role: str


class LoginRequest(BaseModel):
    email: str
    password: str


def public_user(user: dict | None) -> dict | None:
    """
    把資料庫的使用者紀錄轉成可以回傳給前端的格式。
    注意：絕對不能把 hashed_password 放進去！
    """
    if user is None:
        return None
    return {
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "role": user["role"],
        "portfolio": user.get("portfolio"),
    }
