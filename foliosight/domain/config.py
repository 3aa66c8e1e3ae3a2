"""
领域配置 - 权重表、阈值与专家名册

所有常量集中在不可变的 PortfolioConfig 中，进程启动时构建一次，
之后只读，并显式传入每个入口。
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from foliosight.domain.models import ExpertProfile, ExpertType, UserContext


# ==================== 出处信任度 ====================

@dataclass(frozen=True)
class TrustScoreWeights:
    """TrustScore 线性加权系数"""
    base_score: float = 0.35
    recency: float = 0.15
    corroboration: float = 0.15
    author_credibility: float = 0.15
    transparency: float = 0.10
    correction_speed: float = 0.05
    conflict_of_interest: float = -0.05


@dataclass(frozen=True)
class PublisherTiers:
    """出版方分级"""
    tier_1: Tuple[str, ...] = ("Bloomberg", "Reuters", "Morningstar")
    tier_2: Tuple[str, ...] = ("CNBC", "CoinDesk", "FnGuide", "Financial Times")
    tier_3: Tuple[str, ...] = ("Yahoo Finance", "MarketWatch", "Investing.com")


@dataclass(frozen=True)
class SAVLThresholds:
    """SAVL 筛选阈值"""
    watchlist_min: float = 60
    verified_min: float = 75
    cross_validation_min: int = 2
    noise_gate_threshold: int = 3
    noise_gate_penalty: float = -30      # %
    growth_signal: float = 70            # 机会分数的调用方常量
    volatility_context: float = 60
    backtracking_top_n: int = 3


# ==================== 投资目标与风险 ====================

@dataclass(frozen=True)
class InvestmentGoals:
    """投资目标"""
    target_cagr: float = 30
    min_acceptable_cagr: float = 18
    min_consensus_score: float = 8
    min_average_score: float = 7
    max_holdings: int = 10
    bias_guard_threshold: float = 0.6
    max_categories: int = 5
    assets_per_category: int = 2


@dataclass(frozen=True)
class RiskThresholds:
    """风险管理阈值"""
    max_drawdown_warning: float = 25
    min_sharpe_ratio: float = 0.5
    diversification_min_categories: int = 3
    diversification_max_per_category: float = 40
    high_risk_cagr: float = 35
    medium_risk_cagr: float = 25
    aggressive_cagr: float = 30
    rebalance_threshold: float = 5
    risk_free_rate: float = 3


@dataclass(frozen=True)
class ScenarioWeights:
    """情景概率与参数"""
    bull: float = 0.25
    base: float = 0.5
    bear: float = 0.25
    bull_multiplier: float = 1.25
    bear_multiplier: float = 0.75
    bull_drawdown: float = 10
    base_drawdown: float = 20
    bear_drawdown: float = 35
    default_volatility: float = 15
    policy_risk: float = 15


@dataclass(frozen=True)
class ExpertPanelSettings:
    """专家小组参数"""
    debate_spread: float = 3             # 最高分 - 最低分 > 3 触发辩论
    positive_score: float = 7            # 视为正面评价的分数线
    concern_score: float = 7             # 低于该分数时给出担忧
    top_reasons_limit: int = 3
    min_score: float = 1
    max_score: float = 10


# ==================== 专家名册 ====================

def _default_experts() -> Dict[ExpertType, ExpertProfile]:
    return {
        ExpertType.ECONOMIST: ExpertProfile(
            role="宏观经济·利率·经济周期",
            criteria=["经济敏感度", "通胀", "利率前景"],
            weight=1.15,
        ),
        ExpertType.TECH_SPECIALIST: ExpertProfile(
            role="AI·量子计算·半导体·可再生能源",
            criteria=["技术实力", "创新性", "产业外溢效应"],
            weight=1.15,
        ),
        ExpertType.FUTURIST: ExpertProfile(
            role="社会·环境·政策趋势",
            criteria=["可持续性", "ESG", "人口变化"],
            weight=0.9,
        ),
        ExpertType.INVESTMENT_STRATEGIST: ExpertProfile(
            role="组合结构·风险管理",
            criteria=["最优权重", "分散效果"],
            weight=1.0,
        ),
        ExpertType.BLOCKCHAIN_SPECIALIST: ExpertProfile(
            role="数字资产·审计·治理",
            criteria=["可信度", "流动性", "透明度"],
            weight=1.0,
        ),
        ExpertType.DATA_ANALYST: ExpertProfile(
            role="量化模型·市场预测",
            criteria=["增长率", "PER", "Sharpe", "波动率"],
            weight=1.15,
        ),
        ExpertType.BEHAVIORAL_ECONOMIST: ExpertProfile(
            role="投资者行为·心理管理",
            criteria=["情绪控制", "持续投资习惯"],
            weight=0.9,
        ),
        ExpertType.POLITICAL_ECONOMIST: ExpertProfile(
            role="政策·地缘政治·利率·贸易",
            criteria=["地缘政治", "货币", "政策风险"],
            weight=0.9,
        ),
    }


@dataclass(frozen=True)
class PortfolioConfig:
    """
    组合系统的不可变配置

    汇总权重表、阈值常量与专家名册，由各入口显式接收。
    """
    trust_weights: TrustScoreWeights = field(default_factory=TrustScoreWeights)
    publisher_tiers: PublisherTiers = field(default_factory=PublisherTiers)
    savl: SAVLThresholds = field(default_factory=SAVLThresholds)
    goals: InvestmentGoals = field(default_factory=InvestmentGoals)
    risk: RiskThresholds = field(default_factory=RiskThresholds)
    scenarios: ScenarioWeights = field(default_factory=ScenarioWeights)
    panel: ExpertPanelSettings = field(default_factory=ExpertPanelSettings)
    experts: Dict[ExpertType, ExpertProfile] = field(default_factory=_default_experts)
    report_version: str = "v4.2"

    @property
    def expert_weights(self) -> Dict[ExpertType, float]:
        """专家权重表"""
        return {expert_type: profile.weight for expert_type, profile in self.experts.items()}


DEFAULT_CONFIG = PortfolioConfig()


DEFAULT_USER_CONTEXT = UserContext(
    name="default",
    monthly_investment=3_000_000,
    total_investment_period=60,
    target_return=1_000_000_000,
    nationality="KR",
    occupation="marketer",
    investment_goal="长期价值投资（避免短线交易，基于复利积累未来资产）",
    investment_style="成长型（中风险中收益，聚焦科技与创新）",
    investment_method="定投·分散·长期复利",
)
