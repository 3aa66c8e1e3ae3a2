"""
完整报告用例 - 组合 → 复利测算 → 情景模拟 → 出处验证 → PortfolioReport
"""

import logging
from dataclasses import replace
from datetime import date

from foliosight.domain.calculator import calculate_compound_return, run_portfolio_simulation
from foliosight.domain.config import DEFAULT_CONFIG, PortfolioConfig
from foliosight.domain.models import PortfolioReport, ReportMetadata, UserContext
from foliosight.infrastructure.errors import ValidationError
from foliosight.ports.interfaces import TimePort
from foliosight.use_cases.base import UseCase
from foliosight.use_cases.generate_portfolio import GeneratePortfolioUseCase
from foliosight.use_cases.validate_sources import ValidateSourcesUseCase


logger = logging.getLogger(__name__)


def validate_user_context(user_context: UserContext) -> None:
    """校验直接传入用例的用户画像（API 层已由 pydantic 校验）"""
    if user_context.monthly_investment <= 0:
        raise ValidationError("每月投入必须为正数", field="monthly_investment")
    if user_context.total_investment_period <= 0:
        raise ValidationError("投资期必须至少 1 个月", field="total_investment_period")
    if user_context.current_date:
        try:
            date.fromisoformat(user_context.current_date)
        except ValueError:
            raise ValidationError(
                f"无效的报告日期: {user_context.current_date!r}", field="current_date"
            )


class GenerateFullReportUseCase(UseCase[PortfolioReport]):
    """
    完整报告生成

    任何步骤失败都直接向上传播，不返回部分报告。
    """

    def __init__(
        self,
        portfolio_use_case: GeneratePortfolioUseCase,
        validate_sources_use_case: ValidateSourcesUseCase,
        time_port: TimePort,
        config: PortfolioConfig = DEFAULT_CONFIG,
    ):
        self.portfolio = portfolio_use_case
        self.validate_sources = validate_sources_use_case
        self.time = time_port
        self.config = config

    def execute(self, user_context: UserContext) -> PortfolioReport:
        """
        生成完整报告

        Args:
            user_context: 用户画像；current_date 缺省时由时间端口补全

        Returns:
            PortfolioReport: 报告根聚合
        """
        validate_user_context(user_context)

        if not user_context.current_date:
            user_context = replace(user_context, current_date=self.time.get_date())

        plan = self.portfolio.execute(user_context)
        portfolio_cagr = plan.portfolio.target_cagr

        compound = calculate_compound_return(
            user_context.monthly_investment,
            portfolio_cagr,
            user_context.total_investment_period,
        )

        simulation = run_portfolio_simulation(
            portfolio_cagr,
            compound.total_return,
            weights=self.config.scenarios,
            risk_free_rate=self.config.risk.risk_free_rate,
        )

        # 出处最新性以报告日期为基准
        validation = self.validate_sources.execute(as_of=date.fromisoformat(user_context.current_date))

        metadata = ReportMetadata(
            report_date=user_context.current_date,
            version=self.config.report_version,
            monthly_investment=user_context.monthly_investment,
            five_year_goal=user_context.target_return,
            weekly_roi_change=0,
        )

        logger.debug(
            f"报告组装完成: 终值 {compound.final_value:,}, 已验证出处 {len(validation.verified)} 条"
        )

        return PortfolioReport(
            metadata=metadata,
            user_context=user_context,
            selected_categories=plan.selected_categories,
            top_assets=plan.top_assets,
            portfolio=plan.portfolio,
            simulation=simulation,
            compound_calculation=compound,
            expert_consensus=plan.portfolio.expert_consensus,
            sources=list(validation.verified),
            source_validation=validation,
        )
