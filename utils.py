import math
import os
from datetime import datetime

import aiofiles  # 非同步檔案處理套件，避免上傳大檔案時卡住整個伺服器
from fastapi import UploadFile

from errors import ValidationError

# --- 1. 檔案儲存路徑常數 ---
FOLDER_PORTFOLIOS = "portfolios"  # 子資料夾：存放接案人的作品集

ALLOWED_PORTFOLIO_EXTENSIONS = {".pdf", ".png", ".jpg", ".jpeg", ".zip"}

CHUNK_SIZE = 1024


# --- 2. 數值檢查 ---
def is_finite_number(value) -> bool:
    # bool 也是 int 的子類別，要特別排除
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # inf / nan 無法轉成 JSON，也無法存進 JSONB
    return math.isfinite(value)


def is_positive_number(value) -> bool:
    return is_finite_number(value) and value > 0


def setup_upload_directories(upload_root: str):
    """
    伺服器啟動時呼叫，確保資料夾都已經存在。
    """
    os.makedirs(os.path.join(upload_root, FOLDER_PORTFOLIOS), exist_ok=True)


async def save_portfolio_file(file: UploadFile, user_id: int, upload_root: str) -> str:
    """
    儲存使用者的作品集檔案

    - 統一放在 {upload_root}/portfolios/
    - 檔名包含 user_id 與時間，避免互相覆蓋

    回傳:
    - 相對路徑: uploads/portfolios/user_1_20231225103000.pdf
    """
    ext = os.path.splitext(file.filename or "")[1].lower()
    if ext not in ALLOWED_PORTFOLIO_EXTENSIONS:
        raise ValidationError(
            f"portfolio must be one of: {', '.join(sorted(ALLOWED_PORTFOLIO_EXTENSIONS))}"
        )

    target_dir = os.path.join(upload_root, FOLDER_PORTFOLIOS)
    os.makedirs(target_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    new_filename = f"user_{user_id}_{timestamp}{ext}"
    file_path = os.path.join(target_dir, new_filename)

    # 分塊寫入，大檔案也不會吃光記憶體
    async with aiofiles.open(file_path, 'wb') as out_file:
        while content := await file.read(CHUNK_SIZE):
            await out_file.write(content)

    # 回傳給資料庫的路徑一律用 / 分隔
    return f"{upload_root}/{FOLDER_PORTFOLIOS}/{new_filename}"
