"""
组合编排器 - 报告生成的统一入口

设计原则：
1. 单一入口：报告通过 PortfolioOrchestrator 生成
2. 依赖注入：所有端口通过构造函数注入
3. 错误传播：失败直接抛给调用方，不返回部分报告
4. 可观测性：记录每次生成的耗时
"""

import logging
import uuid
from typing import Optional

from foliosight.domain.config import DEFAULT_CONFIG, DEFAULT_USER_CONTEXT, PortfolioConfig
from foliosight.domain.models import GoalFeasibility, PortfolioReport, UserContext
from foliosight.domain.optimizer import evaluate_goal_feasibility
from foliosight.infrastructure.logging import LogContext
from foliosight.ports.interfaces import (
    ExpertScoringPort,
    MarketUniversePort,
    SourceProviderPort,
    TimePort,
)
from foliosight.use_cases.generate_portfolio import GeneratePortfolioUseCase
from foliosight.use_cases.generate_report import GenerateFullReportUseCase
from foliosight.use_cases.run_expert_panel import DebateHook, RunExpertPanelUseCase
from foliosight.use_cases.validate_sources import ValidateSourcesUseCase


logger = logging.getLogger(__name__)


class PortfolioOrchestrator:
    """
    组合编排器

    职责：
    1. 组装专家小组、出处验证、组合生成与报告用例
    2. 生成完整报告
    3. 评估目标可行性
    """

    def __init__(
        self,
        universe_port: MarketUniversePort,
        source_port: SourceProviderPort,
        scoring_port: ExpertScoringPort,
        time_port: TimePort,
        config: PortfolioConfig = DEFAULT_CONFIG,
        debate_hook: Optional[DebateHook] = None,
    ):
        """
        初始化编排器

        Args:
            universe_port: 候选类别与标的
            source_port: 出处
            scoring_port: 专家打分
            time_port: 时间
            config: 不可变配置
            debate_hook: 专家辩论钩子（可选）
        """
        self.time = time_port
        self.config = config

        self.expert_panel = RunExpertPanelUseCase(scoring_port, config, debate_hook)
        self.validate_sources = ValidateSourcesUseCase(source_port, time_port, config)
        self.generate_portfolio = GeneratePortfolioUseCase(
            universe_port, self.expert_panel, time_port, config
        )
        self.generate_report = GenerateFullReportUseCase(
            self.generate_portfolio, self.validate_sources, time_port, config
        )

    def generate_full_report(
        self,
        user_context: Optional[UserContext] = None,
        request_id: Optional[str] = None,
    ) -> PortfolioReport:
        """
        生成完整报告

        Args:
            user_context: 用户画像（缺省使用默认画像）
            request_id: 请求ID（用于日志追踪）

        Returns:
            PortfolioReport: 报告根聚合
        """
        context = user_context or DEFAULT_USER_CONTEXT

        with LogContext(
            logger,
            "generate_full_report",
            request_id=request_id or str(uuid.uuid4()),
            user=context.name,
        ):
            return self.generate_report.execute(context)

    def evaluate_goal_feasibility(self, report: PortfolioReport) -> GoalFeasibility:
        """按报告的复利终值评估目标可行性"""
        return evaluate_goal_feasibility(
            projected_value=report.compound_calculation.final_value,
            target_return=report.user_context.target_return,
            monthly_investment=report.user_context.monthly_investment,
        )


def create_orchestrator(
    universe_port: Optional[MarketUniversePort] = None,
    source_port: Optional[SourceProviderPort] = None,
    scoring_port: Optional[ExpertScoringPort] = None,
    time_port: Optional[TimePort] = None,
    config: PortfolioConfig = DEFAULT_CONFIG,
    seed: Optional[int] = None,
    debate_hook: Optional[DebateHook] = None,
) -> PortfolioOrchestrator:
    """
    创建 PortfolioOrchestrator 实例

    未传入的端口使用模拟适配器，便于依赖注入和测试。
    """
    from foliosight.adapters.expert_scoring_adapter import MockExpertScoringAdapter
    from foliosight.adapters.mock_source_adapter import MockSourceAdapter
    from foliosight.adapters.mock_universe_adapter import MockUniverseAdapter
    from foliosight.adapters.system_time_adapter import SystemTimeAdapter

    return PortfolioOrchestrator(
        universe_port=universe_port or MockUniverseAdapter(),
        source_port=source_port or MockSourceAdapter(config=config),
        scoring_port=scoring_port or MockExpertScoringAdapter(seed=seed),
        time_port=time_port or SystemTimeAdapter(),
        config=config,
        debate_hook=debate_hook,
    )
