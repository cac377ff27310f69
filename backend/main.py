import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import API_PREFIX, HOST, LOG_LEVEL, PORT
from routers import presets_router, sessions_router, settings_router, stats_router
from storage import SessionStorage, create_storage

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """请求数据校验失败统一返回 400"""
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


def create_app(storage: Optional[SessionStorage] = None) -> FastAPI:
    app = FastAPI(
        title="Meditation Timer API",
        description="冥想与呼吸练习的会话记录、设置和统计服务",
        version="1.0.0",
    )
    app.state.storage = storage or create_storage()

    # 配置CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # 生产环境请设置具体域名
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # 注册路由
    app.include_router(sessions_router, prefix=API_PREFIX)
    app.include_router(settings_router, prefix=API_PREFIX)
    app.include_router(stats_router, prefix=API_PREFIX)
    app.include_router(presets_router, prefix=API_PREFIX)

    @app.get("/")
    async def root():
        return {"message": "Meditation Timer API 服务运行中", "version": "1.0.0"}

    @app.get(f"{API_PREFIX}/health")
    async def health_check():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
