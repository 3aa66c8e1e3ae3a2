"""
FolioSight API - 主应用入口

基于 Clean/Hexagonal Architecture 的组合报告 API 服务。

特性：
- 专家共识驱动的类别筛选与资产配置
- 出处 TrustScore 与 SAVL 验证
- 复利与情景模拟
- 统一的响应信封与错误处理
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time
import uuid
import logging

from foliosight.api.routes import health_router, portfolio_router
from foliosight.api.dependencies import get_settings, get_service_container
from foliosight.api.schemas import PortfolioResponse
from foliosight.domain.models import ErrorCode
from foliosight.infrastructure.logging import setup_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
    logger.info("FolioSight API 正在启动...")

    # 预热服务容器
    try:
        get_service_container()
        logger.info("服务容器初始化完成")
    except Exception as e:
        logger.error(f"服务容器初始化失败: {e}")

    yield

    logger.info("FolioSight API 正在关闭...")


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="""
# FolioSight API

多专家共识的投资组合报告 API。

## 接口

- `GET /api/portfolio`：默认画像的完整报告（带缓存，`refresh=true` 强制重建）
- `POST /api/portfolio`：按自定义画像生成报告
- `GET /api/portfolio/export`：JSON 导出下载
- `GET /api/portfolio/report`：Markdown / HTML / 纯文本渲染
        """,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS 中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 请求日志中间件
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}

        try:
            response = await call_next(request)
        except Exception as e:
            duration = (time.perf_counter() - started) * 1000
            logger.error(f"请求异常: {e}", extra={**context, "duration_ms": duration})
            raise

        duration = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={**context, "status_code": response.status_code, "duration_ms": duration},
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.2f}ms"
        return response

    # 全局异常处理
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"未处理的异常: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=PortfolioResponse(
                success=False,
                error="服务器内部错误，请稍后重试",
                error_code=ErrorCode.INTERNAL_ERROR.value,
            ).model_dump(mode="json"),
        )

    # 注册路由
    app.include_router(health_router)
    app.include_router(portfolio_router)

    return app


# 创建应用实例
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "foliosight.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
