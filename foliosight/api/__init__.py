"""
API 层 - FastAPI 路由定义

包含：
- /api/portfolio: 报告生成（GET 默认画像 / POST 自定义画像）
- /api/portfolio/export: JSON 导出
- /api/portfolio/report: 报告渲染
- /health: 健康检查
- /ready, /live: 探针
"""

from foliosight.api.main import app, create_app
from foliosight.api.schemas import (
    UserContextRequest,
    PortfolioResponse,
    ExportPayload,
    HealthResponse,
)
from foliosight.api.dependencies import (
    get_orchestrator,
    get_report_writer,
    get_report_cache,
    get_settings,
    ServiceContainer,
    Settings,
)

__all__ = [
    # 应用
    "app",
    "create_app",
    # 模型
    "UserContextRequest",
    "PortfolioResponse",
    "ExportPayload",
    "HealthResponse",
    # 依赖
    "get_orchestrator",
    "get_report_writer",
    "get_report_cache",
    "get_settings",
    "ServiceContainer",
    "Settings",
]
