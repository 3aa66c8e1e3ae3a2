"""
组合生成用例 - 类别筛选 → 标的选择 → 配置权重 → 专家共识 → 风险分类
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from foliosight.domain.calculator import calculate_diversification_score
from foliosight.domain.config import DEFAULT_CONFIG, PortfolioConfig
from foliosight.domain.models import Asset, AssetCategory, Portfolio, UserContext
from foliosight.domain.optimizer import (
    calculate_portfolio_cagr,
    classify_risk_level,
    classify_strategy_type,
    optimize_allocations,
    select_categories,
    select_top_assets,
)
from foliosight.infrastructure.errors import PortfolioConstructionError
from foliosight.ports.interfaces import MarketUniversePort, TimePort
from foliosight.use_cases.base import UseCase
from foliosight.use_cases.run_expert_panel import RunExpertPanelUseCase


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioPlan:
    """组合生成的中间结果"""
    selected_categories: List[AssetCategory]
    top_assets: List[Asset]
    portfolio: Portfolio


def build_panel_context(user_context: UserContext) -> str:
    """由用户画像生成专家评估语境"""
    lines = [
        f"投资者: {user_context.name}",
        f"每月投入: {user_context.monthly_investment:,.0f}",
        f"投资期: {user_context.total_investment_period} 个月",
        f"目标金额: {user_context.target_return:,.0f}",
    ]
    if user_context.investment_style:
        lines.append(f"投资风格: {user_context.investment_style}")
    if user_context.investment_goal:
        lines.append(f"投资目标: {user_context.investment_goal}")
    return "\n".join(lines)


class GeneratePortfolioUseCase(UseCase[PortfolioPlan]):
    """
    组合生成

    每个入选类别取预期 CAGR 最高的 N 个标的，按 CAGR 比例配置每月投入，
    再由专家小组对首个标的给出整体评估。
    """

    def __init__(
        self,
        universe_port: MarketUniversePort,
        expert_panel: RunExpertPanelUseCase,
        time_port: TimePort,
        config: PortfolioConfig = DEFAULT_CONFIG,
    ):
        self.universe = universe_port
        self.panel = expert_panel
        self.time = time_port
        self.config = config

    def execute(
        self,
        user_context: UserContext,
        assets_per_category: Optional[int] = None,
    ) -> PortfolioPlan:
        """
        生成组合

        Args:
            user_context: 用户画像
            assets_per_category: 每个类别选取的标的数（缺省 2）

        Returns:
            PortfolioPlan: 入选类别、标的与组合

        Raises:
            PortfolioConstructionError: 筛选后没有可投资标的
        """
        per_category = (
            self.config.goals.assets_per_category if assets_per_category is None else assets_per_category
        )

        # 1. 类别筛选
        candidates = self.universe.list_categories()
        selected = [
            replace(category, selected=True)
            for category in select_categories(candidates, self.config)
        ]
        if not selected:
            raise PortfolioConstructionError("没有类别通过筛选", stage="category_screening")

        # 2. 标的选择
        top_assets: List[Asset] = []
        for category in selected:
            top_assets.extend(
                select_top_assets(self.universe.list_assets(category.name), per_category)
            )
        if not top_assets:
            raise PortfolioConstructionError("入选类别下没有候选标的", stage="asset_selection")

        # 3. 配置权重
        allocations = optimize_allocations(top_assets, user_context.monthly_investment)
        portfolio_cagr = calculate_portfolio_cagr(allocations)

        # 4. 专家共识
        consensus = self.panel.run(top_assets[0], build_panel_context(user_context))

        now = self.time.get_current_datetime()
        portfolio = Portfolio(
            user_id=user_context.name,
            created_at=now,
            updated_at=now,
            total_investment=user_context.monthly_investment,
            target_cagr=portfolio_cagr,
            target_return=user_context.target_return,
            allocations=allocations,
            expert_consensus=consensus,
            risk_level=classify_risk_level(portfolio_cagr, self.config),
            strategy_type=classify_strategy_type(portfolio_cagr, self.config),
            diversification_score=calculate_diversification_score(
                [a.allocation for a in allocations]
            ),
        )

        logger.info(
            f"组合生成完成: {len(selected)} 个类别, {len(top_assets)} 个标的, "
            f"CAGR {portfolio_cagr:.2f}%"
        )

        return PortfolioPlan(
            selected_categories=selected,
            top_assets=top_assets,
            portfolio=portfolio,
        )
