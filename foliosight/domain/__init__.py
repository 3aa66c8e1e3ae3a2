"""
领域层 - 核心业务实体、不可变配置与纯计算规则

包含：
- models: 出处、专家、资产、组合与报告模型
- config: PortfolioConfig（权重表、阈值、专家名册）
- trust: TrustScore 评分与出处等级
- savl: 出处两层筛选
- calculator: 复利、Sharpe、HHI 与情景模拟
- experts: 专家共识聚合
- optimizer: 类别筛选、配置权重与目标可行性
"""

from foliosight.domain.models import (
    SourceGrade,
    MisinfoType,
    ExpertType,
    RiskLevel,
    StrategyType,
    ScenarioType,
    ErrorCode,
    UserContext,
    TrustSubscores,
    Source,
    SAVLValidation,
    ExpertProfile,
    ExpertAnalysis,
    ExpertConsensus,
    Asset,
    AssetCategory,
    PortfolioAllocation,
    Portfolio,
    YearlyBreakdown,
    CompoundCalculation,
    ScenarioSimulation,
    PortfolioSimulation,
    InvestmentScheduleEntry,
    ReportMetadata,
    PortfolioReport,
    GoalFeasibility,
    ExportData,
)
from foliosight.domain.config import (
    PortfolioConfig,
    DEFAULT_CONFIG,
    DEFAULT_USER_CONTEXT,
)

__all__ = [
    # 枚举
    "SourceGrade",
    "MisinfoType",
    "ExpertType",
    "RiskLevel",
    "StrategyType",
    "ScenarioType",
    "ErrorCode",
    # 模型
    "UserContext",
    "TrustSubscores",
    "Source",
    "SAVLValidation",
    "ExpertProfile",
    "ExpertAnalysis",
    "ExpertConsensus",
    "Asset",
    "AssetCategory",
    "PortfolioAllocation",
    "Portfolio",
    "YearlyBreakdown",
    "CompoundCalculation",
    "ScenarioSimulation",
    "PortfolioSimulation",
    "InvestmentScheduleEntry",
    "ReportMetadata",
    "PortfolioReport",
    "GoalFeasibility",
    "ExportData",
    # 配置
    "PortfolioConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_USER_CONTEXT",
]
