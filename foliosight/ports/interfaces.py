"""
端口接口定义 - 依赖倒置的核心

所有外部能力（专家打分、资产池、出处、时间、LLM）都通过这些接口注入，
具体实现由适配器层提供。

设计原则：
1. 接口隔离：每个接口只包含相关的方法
2. 依赖倒置：用例层依赖接口，不依赖具体实现
3. 异常抽象：接口定义标准异常类型
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Union

from foliosight.domain.models import (
    Asset,
    AssetCategory,
    ExpertAnalysis,
    ExpertProfile,
    ExpertType,
    Source,
)


# 专家评估对象：单个标的或整个类别
AnalysisTarget = Union[Asset, AssetCategory]


# ==================== 异常定义 ====================

class PortError(Exception):
    """端口层基础异常"""
    def __init__(self, message: str, source: str = "unknown"):
        self.message = message
        self.source = source
        super().__init__(f"[{source}] {message}")


class DataUnavailableError(PortError):
    """数据不可用异常"""
    pass


class ScoringUnavailableError(PortError):
    """专家打分后端不可用"""
    pass


# ==================== 端口接口 ====================

class ExpertScoringPort(ABC):
    """专家打分端口 - 为单个专家生成一份分析"""

    @abstractmethod
    def analyze(
        self,
        expert_type: ExpertType,
        profile: ExpertProfile,
        target: AnalysisTarget,
        context: str,
    ) -> ExpertAnalysis:
        """
        生成专家分析

        Args:
            expert_type: 专家类型
            profile: 专家画像（角色、评估维度、权重）
            target: 评估对象（标的或类别）
            context: 评估语境描述

        Returns:
            ExpertAnalysis: 分数可能越界，由专家小组统一限定

        Raises:
            ScoringUnavailableError: 打分后端不可用
        """
        pass


class MarketUniversePort(ABC):
    """资产池端口 - 候选类别与标的"""

    @abstractmethod
    def list_categories(self) -> List[AssetCategory]:
        """
        获取全部候选类别

        Raises:
            DataUnavailableError: 数据不可用
        """
        pass

    @abstractmethod
    def list_assets(self, category: str) -> List[Asset]:
        """
        获取某一类别下的候选标的

        Args:
            category: 类别名称

        Returns:
            List[Asset]: 未知类别返回空列表
        """
        pass


class SourceProviderPort(ABC):
    """出处端口 - 报告引用的外部出处"""

    @abstractmethod
    def list_sources(self, as_of: date) -> List[Source]:
        """
        获取出处列表

        Args:
            as_of: 计算最新性使用的参考日期

        Returns:
            List[Source]: 已评分的出处
        """
        pass


class TimePort(ABC):
    """时间服务端口"""

    @abstractmethod
    def get_current_datetime(self) -> datetime:
        """
        获取当前日期时间

        Returns:
            datetime: 当前时间
        """
        pass

    @abstractmethod
    def get_formatted_datetime(self, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        """
        获取格式化的日期时间字符串

        Args:
            fmt: 格式字符串

        Returns:
            str: 格式化的时间字符串
        """
        pass

    def get_date(self) -> str:
        """获取当前日期（YYYY-MM-DD）"""
        return self.get_current_datetime().strftime("%Y-%m-%d")


class LLMPort(ABC):
    """LLM 服务端口"""

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """
        根据提示词生成文本

        Args:
            prompt: 提示词

        Returns:
            str: 模型输出

        Raises:
            ScoringUnavailableError: 服务不可用
        """
        pass
