"""FastAPIアプリケーションのメインモジュール

ミドルウェア、ルーティング、例外ハンドラー、ライフサイクル管理を提供
"""

import logging
import time
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from taskstack.api.router import api_router
from taskstack.core.config import get_settings
from taskstack.core.constants import ErrorMessages, HealthStatus
from taskstack.core.context import AppContext
from taskstack.core.exceptions import CacheUnavailableError, StoreUnavailableError
from taskstack.schemas.health import HealthResponse, UnhealthyResponse

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# ルーティングが一致しなかった場合に Starlette が付与する detail
ROUTING_FAILURE_DETAILS = {"Not Found", "Method Not Allowed"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """アプリケーションライフサイクル管理"""
    # 起動時処理
    logger.info(f"🚀 {settings.PROJECT_NAME} を起動しています...")

    context: AppContext | None = getattr(app.state, "context", None)
    if context is None:
        context = AppContext.from_settings(settings)
        app.state.context = context

    try:
        await context.startup()
        logger.info("✅ すべてのサービスが正常に初期化されました")

    except Exception as e:
        logger.error(f"❌ 初期化中にエラーが発生しました: {e}")
        raise

    log_endpoints(app)

    yield

    # 終了時処理
    logger.info(f"🛑 {settings.PROJECT_NAME} を終了しています...")

    try:
        await context.shutdown()
        logger.info("✅ すべてのサービスが正常に終了しました")

    except Exception as e:
        logger.error(f"❌ 終了処理中にエラーが発生しました: {e}")


def log_endpoints(app: FastAPI) -> None:
    """利用可能なエンドポイントをログ出力"""
    logger.info(f"📍 Server listening on port {settings.PORT}")
    logger.info("Available endpoints:")
    for route in app.routes:
        methods = sorted(getattr(route, "methods", None) or [])
        if not methods or not getattr(route, "include_in_schema", False):
            continue
        logger.info(f"  {', '.join(methods):<7} {getattr(route, 'path', '')}")


class AccessLogMiddleware(BaseHTTPMiddleware):
    """リクエストごとにメソッド・パス・ステータス・処理時間をログ出力するミドルウェア"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = (time.perf_counter() - start_time) * 1000

        logger.info(f"{request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.1f}ms")

        if settings.is_development:
            response.headers["X-Process-Time"] = f"{process_time:.1f}ms"

        return cast("Response", response)


def create_application(context: AppContext | None = None) -> FastAPI:
    """アプリケーションを作成

    Args:
        context: 事前に組み立てたコンテキスト（テスト用）
                 省略時は起動時に設定から作成する
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description="キャッシュアサイド方式のタスク管理API",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    if context is not None:
        app.state.context = context

    setup_middleware(app)

    setup_routes(app)

    setup_exception_handlers(app)

    return app


def setup_middleware(app: FastAPI) -> None:
    app.add_middleware(AccessLogMiddleware)

    cors_config = settings.get_cors_config()
    app.add_middleware(CORSMiddleware, **cors_config)

    logger.debug("ミドルウェアの設定が完了しました")


def setup_routes(app: FastAPI) -> None:
    @app.get(
        "/health",
        response_model=HealthResponse,
        responses={503: {"model": UnhealthyResponse}},
        tags=["ヘルスチェック"],
    )
    async def health_check(request: Request) -> dict[str, Any] | JSONResponse:
        context: AppContext = request.app.state.context
        try:
            return await context.health_check()

        except (StoreUnavailableError, CacheUnavailableError) as e:
            logger.error(f"ヘルスチェック中にエラーが発生しました: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": HealthStatus.UNHEALTHY, "error": e.message},
            )

    app.include_router(api_router, prefix=settings.API_PREFIX)

    logger.debug("ルーティングの設定が完了しました")


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # ルート不一致は一律 404
        if exc.status_code in (404, 405) and exc.detail in ROUTING_FAILURE_DETAILS:
            return JSONResponse(status_code=404, content={"error": ErrorMessages.ENDPOINT_NOT_FOUND})

        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else ErrorMessages.INVALID_REQUEST
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"予期しない例外が発生しました: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": ErrorMessages.INTERNAL_SERVER_ERROR})

    logger.debug("例外ハンドラーの設定が完了しました")


# アプリケーションのインスタンスを作成
app = create_application()


def run() -> None:
    """uvicornでサーバーを起動（コンソールスクリプト用）"""
    import uvicorn

    uvicorn.run(
        "taskstack.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=False,  # アクセスログは AccessLogMiddleware が出力
    )


if __name__ == "__main__":
    run()
