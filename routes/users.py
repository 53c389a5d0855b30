from fastapi import APIRouter, Depends, File, Request, UploadFile

from routes.auth import get_current_user
from services import Services, get_services
from utils import save_portfolio_file

# 設定 Router
router = APIRouter()


# =========================================================
# 上傳作品集 (Portfolio)
# =========================================================
@router.post("/me/portfolio")
async def upload_portfolio(
    request: Request,
    file: UploadFile = File(...),
    user: dict = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    upload_root = request.app.state.settings.upload_root
    path = await save_portfolio_file(file, user["id"], upload_root)
    await services.credentials.set_portfolio(user["id"], path)
    return await services.credentials.get_user(user["id"])
