"""
核心领域模型 - 所有业务实体和值对象的定义

设计原则：
1. 不可变性：使用 frozen=True 确保模型不可变
2. 类型安全：严格类型注解
3. 自描述：每个字段都有明确的含义
4. 可序列化：支持 JSON 序列化（to_dict）
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Dict, Any


# ==================== 枚举类型 ====================

class SourceGrade(str, Enum):
    """出处等级"""
    A_PLUS = "A+"
    A = "A"
    B = "B"
    C = "C"


class MisinfoType(str, Enum):
    """信息真实性判定"""
    VERIFIED = "VERIFIED"           # 已验证
    DISPUTED = "DISPUTED"           # 存在争议
    FALSE_LIKELY = "FALSE_LIKELY"   # 疑似虚假


class ExpertType(str, Enum):
    """专家类型（固定 8 人）"""
    ECONOMIST = "economist"
    TECH_SPECIALIST = "tech_specialist"
    FUTURIST = "futurist"
    INVESTMENT_STRATEGIST = "investment_strategist"
    BLOCKCHAIN_SPECIALIST = "blockchain_specialist"
    DATA_ANALYST = "data_analyst"
    BEHAVIORAL_ECONOMIST = "behavioral_economist"
    POLITICAL_ECONOMIST = "political_economist"


class RiskLevel(str, Enum):
    """风险等级"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class StrategyType(str, Enum):
    """策略类型"""
    CONSERVATIVE = "CONSERVATIVE"
    AGGRESSIVE = "AGGRESSIVE"


class ScenarioType(str, Enum):
    """情景类型"""
    BULL = "BULL"
    BASE = "BASE"
    BEAR = "BEAR"


class ErrorCode(str, Enum):
    """错误码"""
    SUCCESS = "success"
    INVALID_INPUT = "invalid_input"
    DATA_UNAVAILABLE = "data_unavailable"
    SCORING_UNAVAILABLE = "scoring_unavailable"
    PORTFOLIO_EMPTY = "portfolio_empty"
    REPORT_FAILED = "report_failed"
    INTERNAL_ERROR = "internal_error"


# ==================== 序列化工具 ====================

def to_serializable(value: Any) -> Any:
    """递归转换为 JSON 友好的结构"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_serializable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(to_serializable(k)): to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(v) for v in value]
    return value


class Serializable:
    """提供 to_dict 的混入类"""

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（用于 JSON 序列化）"""
        return to_serializable(self)


# ==================== 用户上下文 ====================

@dataclass(frozen=True)
class UserContext(Serializable):
    """用户投资画像"""
    name: str
    monthly_investment: float        # 每月投入（货币单位）
    total_investment_period: int     # 投资期（月）
    target_return: float             # 目标金额（货币单位）

    # 可选画像字段
    nationality: Optional[str] = None
    occupation: Optional[str] = None
    investment_goal: Optional[str] = None
    investment_style: Optional[str] = None
    investment_method: Optional[str] = None
    current_date: Optional[str] = None   # YYYY-MM-DD，缺省时由时间端口补全


# ==================== 出处验证（SAVL） ====================

@dataclass(frozen=True)
class TrustSubscores(Serializable):
    """TrustScore 的各项子分数（0-100，缺省值即兜底值）"""
    base_score: float = 50
    recency: float = 50
    corroboration: float = 50
    author_credibility: float = 50
    transparency: float = 50
    correction_speed: float = 50
    conflict_of_interest: float = 0


@dataclass(frozen=True)
class Source(Serializable):
    """外部出处记录，只能通过 create_source 创建"""
    url: str
    title: str
    publisher: str
    publish_date: str
    grade: SourceGrade
    trust_score: int                 # 0-100
    base_score: float
    recency: float
    corroboration: float
    author_credibility: float
    transparency: float
    correction_speed: float
    conflict_of_interest: float
    cross_validation_count: int
    misinfo_type: MisinfoType
    adopted_in_analysis: bool
    reasoning: str


@dataclass(frozen=True)
class SAVLValidation(Serializable):
    """SAVL 两层筛选结果"""
    watchlist: List[Source] = field(default_factory=list)   # TrustScore >= 60
    verified: List[Source] = field(default_factory=list)    # TrustScore >= 75 + 交叉验证 >= 2
    opportunity_score: float = 0.0
    noise_gate_penalty: float = 0.0                          # 百分比，0 或 -30

    @property
    def adjusted_opportunity_score(self) -> float:
        """应用 NoiseGate 惩罚后的机会分数"""
        return self.opportunity_score * (1 + self.noise_gate_penalty / 100)

    def to_dict(self) -> Dict[str, Any]:
        data = to_serializable(self)
        data["adjusted_opportunity_score"] = self.adjusted_opportunity_score
        return data


# ==================== 专家系统 ====================

@dataclass(frozen=True)
class ExpertProfile(Serializable):
    """专家画像：角色描述、评估维度与权重"""
    role: str
    criteria: List[str]
    weight: float


@dataclass(frozen=True)
class ExpertAnalysis(Serializable):
    """单个专家对某一资产/类别的判断"""
    expert_type: ExpertType
    perspective: str
    key_points: List[str]
    score: float                     # 1-10
    reasoning: str
    concerns: Optional[List[str]] = None


@dataclass(frozen=True)
class ExpertConsensus(Serializable):
    """专家共识"""
    analyses: List[ExpertAnalysis]
    consensus_score: float
    top_reasons: List[str]
    dissenting_opinion: Optional[str] = None
    bias_guard_triggered: bool = False
    debate_triggered: bool = False


# ==================== 资产 ====================

@dataclass(frozen=True)
class Asset(Serializable):
    """投资标的"""
    category: str
    ticker: str
    name: str
    industry: str
    key_growth_points: List[str]
    expected_cagr: float             # %
    trust_grade: SourceGrade
    sources: List[Source] = field(default_factory=list)
    current_price: Optional[float] = None
    buy_price: Optional[float] = None
    sell_price: Optional[float] = None
    holding_period: int = 5          # 年
    expected_return: float = 0


@dataclass(frozen=True)
class AssetCategory(Serializable):
    """资产类别（各项评分 1-10）"""
    name: str
    growth_score: float
    innovation_score: float
    sustainability_score: float
    trust_score: float
    compound_potential: float
    average_score: float
    consensus_score: float
    cagr: float                      # %
    sharpe_ratio: float
    max_drawdown: float              # %
    selected: bool = False


# ==================== 投资组合 ====================

@dataclass(frozen=True)
class PortfolioAllocation(Serializable):
    """组合内单个标的的配置"""
    category: str
    ticker: str
    allocation: float                # %，组合内合计约为 100
    amount: float
    cagr: float
    expected_return: float = 0


@dataclass(frozen=True)
class Portfolio(Serializable):
    """投资组合"""
    user_id: str
    created_at: datetime
    updated_at: datetime
    total_investment: float
    target_cagr: float
    target_return: float
    allocations: List[PortfolioAllocation]
    expert_consensus: ExpertConsensus
    risk_level: RiskLevel
    strategy_type: StrategyType
    diversification_score: float = 0.0


# ==================== 计算与模拟 ====================

@dataclass(frozen=True)
class YearlyBreakdown(Serializable):
    """按年拆分的复利结果"""
    year: int
    invested: float
    value: float
    gain: float


@dataclass(frozen=True)
class CompoundCalculation(Serializable):
    """定投复利测算"""
    monthly_investment: float
    investment_period: int           # 月
    cagr: float                      # %
    total_invested: float
    final_value: float
    total_return: float
    yearly_breakdown: List[YearlyBreakdown] = field(default_factory=list)


@dataclass(frozen=True)
class ScenarioSimulation(Serializable):
    """单个情景"""
    scenario: ScenarioType
    probability: float               # %
    expected_return: float
    cagr: float                      # %
    drawdown: float                  # %


@dataclass(frozen=True)
class PortfolioSimulation(Serializable):
    """情景模拟结果"""
    scenarios: List[ScenarioSimulation]
    weighted_roi: float
    sharpe_ratio: float
    volatility: float
    policy_risk: float


@dataclass(frozen=True)
class InvestmentScheduleEntry(Serializable):
    """月度定投计划条目"""
    month: int
    date: str
    amount: float
    cumulative: float


# ==================== 报告 ====================

@dataclass(frozen=True)
class ReportMetadata(Serializable):
    """报告元数据"""
    report_date: str
    version: str
    monthly_investment: float
    five_year_goal: float
    weekly_roi_change: float = 0


@dataclass(frozen=True)
class PortfolioReport(Serializable):
    """完整报告 - 交给表现层的根聚合"""
    metadata: ReportMetadata
    user_context: UserContext
    selected_categories: List[AssetCategory]
    top_assets: List[Asset]
    portfolio: Portfolio
    simulation: PortfolioSimulation
    compound_calculation: CompoundCalculation
    expert_consensus: ExpertConsensus
    sources: List[Source]
    source_validation: Optional[SAVLValidation] = None

    def to_dict(self) -> Dict[str, Any]:
        data = to_serializable(self)
        if self.source_validation is not None:
            data["source_validation"] = self.source_validation.to_dict()
        return data


@dataclass(frozen=True)
class GoalFeasibility(Serializable):
    """目标达成可行性评估"""
    achievable: bool
    confidence: float
    recommendation: str
    ratio: float = 0.0


@dataclass(frozen=True)
class ExportData(Serializable):
    """JSON 导出结构"""
    categories: List[str]
    tickers: List[str]
    cagr: List[float]
    allocation_percent: List[float]
    expected_return: List[float]
    source_urls: List[List[str]]
    trust_scores: List[int]
    report_date: str
