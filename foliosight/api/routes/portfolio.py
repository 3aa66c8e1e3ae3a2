"""
组合路由 - 报告生成、导出与渲染
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from foliosight.api.dependencies import (
    CachedReport,
    Settings,
    get_orchestrator,
    get_report_cache,
    get_report_writer,
    get_settings,
)
from foliosight.api.schemas import (
    ExportPayload,
    FeasibilityData,
    PortfolioData,
    PortfolioResponse,
    ReportFormatEnum,
    UserContextRequest,
)
from foliosight.domain.config import DEFAULT_USER_CONTEXT
from foliosight.domain.models import UserContext
from foliosight.infrastructure.cache import LRUCache
from foliosight.infrastructure.errors import ErrorHandler
from foliosight.orchestrator import PortfolioOrchestrator
from foliosight.presentation import ReportFormat, ReportWriter, build_export_data


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Portfolio"])

NO_CACHE = "no-cache"


# ==================== 辅助函数 ====================

def _generate(orchestrator: PortfolioOrchestrator, user_context: UserContext) -> CachedReport:
    request_id = uuid.uuid4().hex
    report = orchestrator.generate_full_report(user_context, request_id=request_id)
    feasibility = orchestrator.evaluate_goal_feasibility(report)
    return report, feasibility


def _default_report(
    orchestrator: PortfolioOrchestrator,
    cache: LRUCache,
    refresh: bool = False,
) -> CachedReport:
    """默认画像的报告；refresh 时跳过缓存并写入新结果"""
    cache_key = LRUCache.make_key("portfolio", DEFAULT_USER_CONTEXT.to_dict())
    return cache.get_or_create(
        cache_key,
        lambda: _generate(orchestrator, DEFAULT_USER_CONTEXT),
        refresh=refresh,
    )


def _success_response(result: CachedReport, cache_control: str) -> JSONResponse:
    report, feasibility = result
    body = PortfolioResponse(
        success=True,
        data=PortfolioData(
            report=report.to_dict(),
            feasibility=FeasibilityData.from_domain(feasibility),
        ),
    )
    return JSONResponse(
        content=body.model_dump(mode="json"),
        headers={"Cache-Control": cache_control},
    )


def error_response(exc: Exception, context: Optional[str] = None) -> JSONResponse:
    """将任意异常转换为失败信封（HTTP 500）"""
    error = ErrorHandler.handle_exception(exc, context)
    logger.error(f"报告生成失败: {error.message}", exc_info=exc)
    body = PortfolioResponse(
        success=False,
        error=error.message,
        error_code=error.error_code.value,
    )
    return JSONResponse(
        status_code=500,
        content=body.model_dump(mode="json"),
        headers={"Cache-Control": NO_CACHE},
    )


# ==================== 路由 ====================

@router.get(
    "/portfolio",
    response_model=PortfolioResponse,
    responses={500: {"model": PortfolioResponse, "description": "报告生成失败"}},
    summary="获取组合报告",
    description="使用默认画像生成报告与目标可行性评估；refresh=true 时跳过缓存"
)
async def get_portfolio(
    refresh: bool = Query(default=False, description="是否强制重新生成"),
    orchestrator: PortfolioOrchestrator = Depends(get_orchestrator),
    cache: LRUCache = Depends(get_report_cache),
    settings: Settings = Depends(get_settings),
):
    """获取默认画像的组合报告"""
    try:
        result = _default_report(orchestrator, cache, refresh=refresh)
    except Exception as e:
        return error_response(e, "portfolio")

    cache_control = NO_CACHE if refresh else f"public, max-age={settings.REPORT_CACHE_TTL}"
    return _success_response(result, cache_control)


@router.post(
    "/portfolio",
    response_model=PortfolioResponse,
    responses={500: {"model": PortfolioResponse, "description": "报告生成失败"}},
    summary="按自定义画像生成报告",
)
async def create_portfolio(
    request: UserContextRequest,
    orchestrator: PortfolioOrchestrator = Depends(get_orchestrator),
):
    """按请求中的画像生成报告（不缓存）"""
    try:
        result = _generate(orchestrator, request.to_domain())
    except Exception as e:
        return error_response(e, "portfolio")

    return _success_response(result, NO_CACHE)


@router.get(
    "/portfolio/export",
    response_model=ExportPayload,
    summary="导出 JSON",
    description="以附件形式下载默认报告的导出结构"
)
async def export_portfolio(
    orchestrator: PortfolioOrchestrator = Depends(get_orchestrator),
    cache: LRUCache = Depends(get_report_cache),
):
    """导出默认报告"""
    try:
        report, _ = _default_report(orchestrator, cache)
    except Exception as e:
        return error_response(e, "export")

    export = build_export_data(report)
    filename = f"portfolio-{export.report_date}.json"
    return JSONResponse(
        content=ExportPayload(**export.to_dict()).model_dump(mode="json"),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/portfolio/report",
    summary="渲染报告",
    description="以 Markdown、HTML 或纯文本渲染默认报告"
)
async def render_portfolio_report(
    format: ReportFormatEnum = Query(default=ReportFormatEnum.MARKDOWN, description="报告格式"),
    orchestrator: PortfolioOrchestrator = Depends(get_orchestrator),
    cache: LRUCache = Depends(get_report_cache),
    report_writer: ReportWriter = Depends(get_report_writer),
) -> Response:
    """渲染默认报告"""
    try:
        report, feasibility = _default_report(orchestrator, cache)
        content = report_writer.generate(
            report,
            format=ReportFormat(format.value),
            feasibility=feasibility,
        )
    except Exception as e:
        return error_response(e, "report")

    if format == ReportFormatEnum.HTML:
        return HTMLResponse(content=content)
    media_type = "text/markdown" if format == ReportFormatEnum.MARKDOWN else "text/plain"
    return PlainTextResponse(content=content, media_type=media_type)
