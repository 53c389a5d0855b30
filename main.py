import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import Settings, get_settings
from db import Storage, create_storage
from errors import MarketplaceError
from log_config import configure_logging
from services import build_services
from utils import setup_upload_directories

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    """
    建立應用程式。
    settings / storage 沒給的話就從環境變數讀取並自動建立 (測試時可以直接塞進來)。
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    # --- 1. 生命週期：啟動時開啟儲存層並建立各元件，關閉時釋放 ---
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = storage or create_storage(settings)
        await store.open()
        setup_upload_directories(settings.upload_root)
        app.state.storage = store
        app.state.services = build_services(store, settings)
        logger.info("服務啟動完成 (storage=%s)", type(store).__name__)
        try:
            yield
        finally:
            await store.close()

    # --- 2. 建立應用程式 ---
    app = FastAPI(title="Freelance Marketplace API", lifespan=lifespan)
    app.state.settings = settings

    # --- 3. CORS：讓前端 (不同網域) 可以呼叫 API ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- 4. 錯誤處理：每一種錯誤對應自己的狀態碼，回傳 {"error": ...} ---
    @app.exception_handler(MarketplaceError)
    async def handle_marketplace_error(request: Request, exc: MarketplaceError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else first.get("msg")
        else:
            message = "Invalid input"
        return JSONResponse(status_code=400, content={"error": message})

    # --- 5. 註冊路由 ---
    from routes.auth import router as auth_router
    from routes.jobs import router as jobs_router
    from routes.users import router as users_router
    from routes.payments import router as payments_router

    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(jobs_router, prefix="/api/jobs")
    app.include_router(users_router, prefix="/api/users")
    app.include_router(payments_router)  # /pay (無前綴)

    # --- 6. 上傳的作品集可以透過 /uploads/... 讀取 ---
    app.mount("/uploads", StaticFiles(directory=settings.upload_root, check_dir=False), name="uploads")

    return app


# 啟動方式：uvicorn main:create_app --factory
# 不在 import 時建立 app，設定 (包含 log level) 由呼叫 create_app 的人決定
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=get_settings().port)
