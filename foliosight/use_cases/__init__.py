"""
用例层 - 业务逻辑的核心实现

每个用例代表一个独立的业务场景，
只依赖 ports 接口，不依赖具体实现。

包含：
- RunExpertPanelUseCase: 专家小组评估
- ValidateSourcesUseCase: 出处 SAVL 验证
- GeneratePortfolioUseCase: 组合生成
- GenerateFullReportUseCase: 完整报告
"""

from foliosight.use_cases.base import UseCase
from foliosight.use_cases.run_expert_panel import ExpertPanel, RunExpertPanelUseCase
from foliosight.use_cases.validate_sources import ValidateSourcesUseCase
from foliosight.use_cases.generate_portfolio import (
    GeneratePortfolioUseCase,
    PortfolioPlan,
    build_panel_context,
)
from foliosight.use_cases.generate_report import GenerateFullReportUseCase

__all__ = [
    "UseCase",
    "ExpertPanel",
    "RunExpertPanelUseCase",
    "ValidateSourcesUseCase",
    "GeneratePortfolioUseCase",
    "PortfolioPlan",
    "build_panel_context",
    "GenerateFullReportUseCase",
]
