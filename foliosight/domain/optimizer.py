"""
组合优化规则 - 类别筛选、标的选择、配置权重、风险分类与目标可行性
"""

import logging
from typing import List, Optional, Sequence, Tuple

from foliosight.domain.calculator import round_half_up
from foliosight.domain.config import DEFAULT_CONFIG, PortfolioConfig
from foliosight.domain.models import (
    Asset,
    AssetCategory,
    GoalFeasibility,
    PortfolioAllocation,
    RiskLevel,
    StrategyType,
)


logger = logging.getLogger(__name__)


# 比例 >= 1 时的置信度分段（比例 -> 置信度）
FEASIBILITY_BREAKPOINTS: Tuple[Tuple[float, float], ...] = (
    (1.0, 75.0),
    (1.1, 85.0),
    (1.2, 95.0),
)
MAX_CONFIDENCE = 95.0
MIN_CONFIDENCE = 20.0


# ==================== 类别与标的 ====================

def is_category_eligible(category: AssetCategory, config: PortfolioConfig = DEFAULT_CONFIG) -> bool:
    """平均分 >= 7、共识分 >= 8、CAGR >= 18 且最大回撤 < 25"""
    return (
        category.average_score >= config.goals.min_average_score
        and category.consensus_score >= config.goals.min_consensus_score
        and category.cagr >= config.goals.min_acceptable_cagr
        and category.max_drawdown < config.risk.max_drawdown_warning
    )


def select_categories(
    categories: Sequence[AssetCategory],
    config: PortfolioConfig = DEFAULT_CONFIG,
) -> List[AssetCategory]:
    """
    类别筛选

    保持输入顺序，最多保留 5 个；不足 3 个时只记录警告。
    """
    selected = [c for c in categories if is_category_eligible(c, config)]

    minimum = config.risk.diversification_min_categories
    if len(selected) < minimum:
        logger.warning(f"仅有 {len(selected)} 个类别入选，至少需要 {minimum} 个")

    return selected[:config.goals.max_categories]


def select_top_assets(assets: Sequence[Asset], count: int = 3) -> List[Asset]:
    """按预期 CAGR 降序取前 N 个（不修改输入）"""
    ranked = sorted(assets, key=lambda a: a.expected_cagr, reverse=True)
    return ranked[:max(0, count)]


# ==================== 配置权重 ====================

def optimize_allocations(
    assets: Sequence[Asset],
    total_investment: float,
) -> List[PortfolioAllocation]:
    """
    按预期 CAGR 比例配置

    配置比例保留 2 位小数，金额取整；舍入残差计入最大的一项，
    使配置合计恰为 100。CAGR 合计不为正时改为等权。

    Args:
        assets: 入选标的
        total_investment: 投入总额

    Returns:
        List[PortfolioAllocation]: 与 assets 顺序一致
    """
    if not assets:
        return []

    total_cagr = sum(a.expected_cagr for a in assets)
    if total_cagr > 0:
        weights = [a.expected_cagr / total_cagr for a in assets]
    else:
        logger.warning("CAGR 合计不为正，改用等权配置")
        weights = [1 / len(assets)] * len(assets)

    percents = [round_half_up(w * 100, 2) for w in weights]
    residual = round_half_up(100 - sum(percents), 2)
    if residual:
        largest = max(range(len(percents)), key=lambda i: percents[i])
        percents[largest] = round_half_up(percents[largest] + residual, 2)

    return [
        PortfolioAllocation(
            category=asset.category,
            ticker=asset.ticker,
            allocation=percent,
            amount=round_half_up(total_investment * weight),
            cagr=asset.expected_cagr,
            expected_return=0,
        )
        for asset, weight, percent in zip(assets, weights, percents)
    ]


def calculate_portfolio_cagr(allocations: Sequence[PortfolioAllocation]) -> float:
    """组合 CAGR = Σ(cagr × allocation/100)"""
    return sum(a.cagr * (a.allocation / 100) for a in allocations)


# ==================== 分类 ====================

def classify_risk_level(portfolio_cagr: float, config: PortfolioConfig = DEFAULT_CONFIG) -> RiskLevel:
    if portfolio_cagr >= config.risk.high_risk_cagr:
        return RiskLevel.HIGH
    if portfolio_cagr >= config.risk.medium_risk_cagr:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def classify_strategy_type(portfolio_cagr: float, config: PortfolioConfig = DEFAULT_CONFIG) -> StrategyType:
    if portfolio_cagr >= config.risk.aggressive_cagr:
        return StrategyType.AGGRESSIVE
    return StrategyType.CONSERVATIVE


# ==================== 目标可行性 ====================

def feasibility_confidence(ratio: float) -> float:
    """
    目标达成置信度

    比例 < 1 时每差 1% 扣 1 分（75 起，下限 20）；比例 >= 1 时按分段线性插值，上限 95。
    """
    if ratio < 1.0:
        return round_half_up(max(MIN_CONFIDENCE, 75 - (1 - ratio) * 100), 1)

    for (x0, y0), (x1, y1) in zip(FEASIBILITY_BREAKPOINTS, FEASIBILITY_BREAKPOINTS[1:]):
        if ratio <= x1:
            value = y0 + (ratio - x0) / (x1 - x0) * (y1 - y0)
            return round_half_up(min(MAX_CONFIDENCE, value), 1)

    return MAX_CONFIDENCE


def evaluate_goal_feasibility(
    projected_value: float,
    target_return: float,
    monthly_investment: float,
) -> GoalFeasibility:
    """
    目标达成可行性

    ratio = 预计终值 / 目标金额；ratio >= 1 视为可达成。
    目标金额不为正时视为必然可达成。
    """
    if target_return <= 0:
        return GoalFeasibility(
            achievable=True,
            confidence=MAX_CONFIDENCE,
            recommendation="目标可达成！保持当前策略",
            ratio=0.0,
        )

    ratio = projected_value / target_return
    confidence = feasibility_confidence(ratio)

    if ratio >= 1.0:
        surplus = round_half_up((ratio - 1) * 100)
        return GoalFeasibility(
            achievable=True,
            confidence=confidence,
            recommendation=f"目标可达成！保持当前策略，预计超额完成 {surplus}%",
            ratio=ratio,
        )

    shortfall = round_half_up((1 - ratio) * 100)
    top_up: Optional[int] = None
    if ratio > 0:
        top_up = round_half_up(monthly_investment * (1 / ratio - 1))

    if top_up is None:
        recommendation = f"距目标还差 {shortfall}%。建议提高每月投入或采用更积极的策略"
    else:
        recommendation = (
            f"距目标还差 {shortfall}%。建议每月追加投入 {top_up:,}，或采用更积极的策略"
        )

    return GoalFeasibility(
        achievable=False,
        confidence=confidence,
        recommendation=recommendation,
        ratio=ratio,
    )
