"""
组合计算工具 - 复利、CAGR、Sharpe、回撤、分散度、情景模拟

所有函数均为纯函数；分母为零或无定义时返回约定的兜底值，不抛异常。
"""

import calendar
import math
from datetime import date
from typing import List, Optional, Sequence

from foliosight.domain.config import DEFAULT_CONFIG, ScenarioWeights
from foliosight.domain.models import (
    CompoundCalculation,
    InvestmentScheduleEntry,
    PortfolioSimulation,
    ScenarioSimulation,
    ScenarioType,
    YearlyBreakdown,
)


# ==================== 数值工具 ====================

def clamp(value: float, lo: float = 0, hi: float = 100) -> float:
    """将数值限制在 [lo, hi] 区间"""
    return max(lo, min(hi, float(value)))


def round_half_up(value: float, digits: int = 0) -> float:
    """四舍五入（0.5 进位，不使用银行家舍入）"""
    factor = 10 ** digits
    rounded = math.floor(abs(value) * factor + 0.5) / factor
    rounded = math.copysign(rounded, value)
    return int(rounded) if digits == 0 else rounded


def _annuity_due_value(monthly_investment: float, monthly_rate: float, months: int) -> float:
    """期初年金终值；月利率为 0 时退化为线性累计"""
    if monthly_rate == 0:
        return monthly_investment * months
    growth = math.pow(1 + monthly_rate, months)
    return monthly_investment * ((growth - 1) / monthly_rate) * (1 + monthly_rate)


# ==================== 复利与收益率 ====================

def calculate_compound_return(
    monthly_investment: float,
    cagr: float,
    investment_period: int,
) -> CompoundCalculation:
    """
    定投复利测算

    FV = P × [((1+i)^n − 1)/i] × (1+i)，i = r/100/12

    Args:
        monthly_investment: 每月投入
        cagr: 年化增长率（%）
        investment_period: 投资期（月）

    Returns:
        CompoundCalculation: 总投入、终值、收益与逐年拆分
    """
    monthly_rate = cagr / 100 / 12
    total_months = max(0, int(investment_period))

    future_value = _annuity_due_value(monthly_investment, monthly_rate, total_months)
    total_invested = monthly_investment * total_months
    total_return = future_value - total_invested

    yearly_breakdown: List[YearlyBreakdown] = []
    years = math.ceil(total_months / 12)

    for year in range(1, years + 1):
        months_elapsed = min(year * 12, total_months)
        invested = monthly_investment * months_elapsed
        value = _annuity_due_value(monthly_investment, monthly_rate, months_elapsed)

        yearly_breakdown.append(YearlyBreakdown(
            year=year,
            invested=round_half_up(invested),
            value=round_half_up(value),
            gain=round_half_up(value - invested),
        ))

    return CompoundCalculation(
        monthly_investment=monthly_investment,
        investment_period=total_months,
        cagr=cagr,
        total_invested=round_half_up(total_invested),
        final_value=round_half_up(future_value),
        total_return=round_half_up(total_return),
        yearly_breakdown=yearly_breakdown,
    )


def calculate_cagr(initial_value: float, final_value: float, years: float) -> float:
    """
    年化增长率（%）：(FV/PV)^(1/n) − 1

    years <= 0 或 initial_value <= 0 时无定义，返回 0；
    final_value <= 0 视为全部亏损，返回 -100。
    """
    if years <= 0 or initial_value <= 0:
        return 0.0
    if final_value <= 0:
        return -100.0
    return (math.pow(final_value / initial_value, 1 / years) - 1) * 100


def calculate_sharpe_ratio(returns: Sequence[float], risk_free_rate: float = 3) -> float:
    """
    Sharpe Ratio = (平均收益 − 无风险收益) / 标准差（总体标准差）

    空序列或方差为 0 时返回 0。
    """
    if not returns:
        return 0.0

    avg_return = sum(returns) / len(returns)
    variance = sum((r - avg_return) ** 2 for r in returns) / len(returns)
    std_dev = math.sqrt(variance)

    if std_dev == 0:
        return 0.0

    return (avg_return - risk_free_rate) / std_dev


def calculate_max_drawdown(values: Sequence[float]) -> float:
    """最大回撤（%），单次遍历记录历史峰值"""
    if not values:
        return 0.0

    max_drawdown = 0.0
    peak = values[0]

    for value in values:
        if value > peak:
            peak = value
        if peak <= 0:
            continue

        drawdown = (peak - value) / peak * 100
        if drawdown > max_drawdown:
            max_drawdown = drawdown

    return max_drawdown


def calculate_diversification_score(allocations: Sequence[float]) -> float:
    """
    分散度评分（0-100）

    基于 HHI = Σ allocation²，按 ((10000 − HHI)/(10000 − 10000/n))×100 归一化。
    HHI 越低（越均匀）得分越高；空组合或单一持仓返回 0。
    """
    if not allocations:
        return 0.0

    hhi = sum(a ** 2 for a in allocations)
    max_hhi = 10000
    min_hhi = 10000 / len(allocations)

    if max_hhi == min_hhi:
        return 0.0

    score = (max_hhi - hhi) / (max_hhi - min_hhi) * 100
    return clamp(score)


# ==================== 情景模拟 ====================

def simulate_scenarios(
    base_cagr: float,
    base_return: float,
    weights: ScenarioWeights = DEFAULT_CONFIG.scenarios,
) -> List[ScenarioSimulation]:
    """Bull(+25%) / Base / Bear(−25%) 三种情景"""
    return [
        ScenarioSimulation(
            scenario=ScenarioType.BULL,
            probability=weights.bull * 100,
            expected_return=round_half_up(base_return * weights.bull_multiplier),
            cagr=base_cagr * weights.bull_multiplier,
            drawdown=weights.bull_drawdown,
        ),
        ScenarioSimulation(
            scenario=ScenarioType.BASE,
            probability=weights.base * 100,
            expected_return=round_half_up(base_return),
            cagr=base_cagr,
            drawdown=weights.base_drawdown,
        ),
        ScenarioSimulation(
            scenario=ScenarioType.BEAR,
            probability=weights.bear * 100,
            expected_return=round_half_up(base_return * weights.bear_multiplier),
            cagr=base_cagr * weights.bear_multiplier,
            drawdown=weights.bear_drawdown,
        ),
    ]


def calculate_weighted_roi(scenarios: Sequence[ScenarioSimulation]) -> float:
    """概率加权 ROI = Σ(expected_return × probability/100)"""
    return sum(s.expected_return * (s.probability / 100) for s in scenarios)


def run_portfolio_simulation(
    base_cagr: float,
    base_return: float,
    volatility: Optional[float] = None,
    weights: ScenarioWeights = DEFAULT_CONFIG.scenarios,
    risk_free_rate: float = 3,
) -> PortfolioSimulation:
    """
    组合情景模拟

    Sharpe 使用围绕基准 CAGR 的示例收益序列估算（暂无历史数据）。
    """
    scenarios = simulate_scenarios(base_cagr, base_return, weights)
    weighted_roi = calculate_weighted_roi(scenarios)

    sample_returns = [
        base_cagr,
        base_cagr * 1.1,
        base_cagr * 0.9,
        base_cagr * 1.2,
        base_cagr * 0.85,
    ]
    sharpe_ratio = calculate_sharpe_ratio(sample_returns, risk_free_rate)

    return PortfolioSimulation(
        scenarios=scenarios,
        weighted_roi=round_half_up(weighted_roi),
        sharpe_ratio=round_half_up(sharpe_ratio, 2),
        volatility=weights.default_volatility if volatility is None else volatility,
        policy_risk=weights.policy_risk,
    )


# ==================== 其他指标 ====================

def calculate_success_probability(current_projection: float, target_return: float) -> float:
    """目标达成概率（%），按固定分段取值"""
    if target_return <= 0:
        return 95.0

    ratio = current_projection / target_return

    if ratio >= 1.2:
        return 95.0
    if ratio >= 1.1:
        return 85.0
    if ratio >= 1.0:
        return 75.0
    if ratio >= 0.9:
        return 60.0
    if ratio >= 0.8:
        return 45.0
    if ratio >= 0.7:
        return 30.0
    return 15.0


def calculate_undervaluation_score(intrinsic_value: float, current_price: float) -> float:
    """低估评分 = (内在价值 / 现价) × 10；现价为 0 时返回 0"""
    if current_price == 0:
        return 0.0
    return intrinsic_value / current_price * 10


def needs_rebalancing(
    current_allocations: Sequence[float],
    target_allocations: Sequence[float],
    threshold: float = 5,
) -> bool:
    """长度不同或任一偏离严格超过阈值（百分点）时需要再平衡"""
    if len(current_allocations) != len(target_allocations):
        return True

    return any(
        abs(current - target) > threshold
        for current, target in zip(current_allocations, target_allocations)
    )


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_investment_schedule(
    start_date: date,
    months: int,
    monthly_amount: float,
) -> List[InvestmentScheduleEntry]:
    """生成月度定投计划；月末日期按目标月份天数截断"""
    schedule: List[InvestmentScheduleEntry] = []
    cumulative = 0.0

    for i in range(max(0, months)):
        cumulative += monthly_amount
        schedule.append(InvestmentScheduleEntry(
            month=i + 1,
            date=_add_months(start_date, i).isoformat(),
            amount=monthly_amount,
            cumulative=cumulative,
        ))

    return schedule
