"""
API 请求/响应模型 - Pydantic Schema 定义

所有 API 的输入输出都通过这些模型定义，
确保类型安全和自动文档生成。
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from foliosight.domain.models import GoalFeasibility, UserContext


# ==================== 枚举类型 ====================

class ReportFormatEnum(str, Enum):
    """报告格式"""
    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"


# ==================== 请求模型 ====================

class UserContextRequest(BaseModel):
    """用户画像请求"""
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="投资者名称"
    )
    monthly_investment: float = Field(
        ...,
        gt=0,
        description="每月投入（货币单位）"
    )
    total_investment_period: int = Field(
        ...,
        gt=0,
        le=600,
        description="投资期（月）"
    )
    target_return: float = Field(
        ...,
        gt=0,
        description="目标金额（货币单位）"
    )
    nationality: Optional[str] = Field(default=None, max_length=50)
    occupation: Optional[str] = Field(default=None, max_length=100)
    investment_goal: Optional[str] = Field(default=None, max_length=500)
    investment_style: Optional[str] = Field(default=None, max_length=500)
    investment_method: Optional[str] = Field(default=None, max_length=500)
    current_date: Optional[str] = Field(
        default=None,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="报告日期（YYYY-MM-DD），缺省为今天"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """验证名称"""
        v = v.strip()
        if not v:
            raise ValueError('名称不能为空')
        return v

    def to_domain(self) -> UserContext:
        """转换为领域模型"""
        return UserContext(**self.model_dump())


# ==================== 响应模型 ====================

class FeasibilityData(BaseModel):
    """目标可行性"""
    achievable: bool
    confidence: float
    recommendation: str
    ratio: float = 0.0

    @classmethod
    def from_domain(cls, feasibility: GoalFeasibility) -> "FeasibilityData":
        return cls(**feasibility.to_dict())


class PortfolioData(BaseModel):
    """报告与可行性"""
    report: Dict[str, Any] = Field(..., description="PortfolioReport 的 JSON 结构")
    feasibility: FeasibilityData


class PortfolioResponse(BaseModel):
    """统一响应信封"""
    success: bool = Field(..., description="是否成功")
    data: Optional[PortfolioData] = Field(default=None, description="成功时的数据")
    error: Optional[str] = Field(default=None, description="失败时的错误信息")
    error_code: Optional[str] = Field(default=None, description="错误码")
    timestamp: datetime = Field(default_factory=datetime.now, description="响应时间戳")


class ExportPayload(BaseModel):
    """JSON 导出结构"""
    categories: List[str]
    tickers: List[str]
    cagr: List[float]
    allocation_percent: List[float]
    expected_return: List[float]
    source_urls: List[List[str]]
    trust_scores: List[int]
    report_date: str


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str = Field(..., description="服务状态")
    timestamp: datetime = Field(..., description="检查时间")
    version: str = Field(..., description="API 版本")
    components: Dict[str, str] = Field(default_factory=dict, description="组件状态")
