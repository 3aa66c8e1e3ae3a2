"""
端口层 - 定义与外部世界交互的接口

遵循依赖倒置原则，用例层只依赖这些抽象接口，
具体实现由适配器层提供。

包含：
- ExpertScoringPort: 专家打分接口
- MarketUniversePort: 候选类别与标的接口
- SourceProviderPort: 出处接口
- TimePort: 时间服务接口
- LLMPort: LLM 服务接口
"""

from foliosight.ports.interfaces import (
    AnalysisTarget,
    PortError,
    DataUnavailableError,
    ScoringUnavailableError,
    ExpertScoringPort,
    MarketUniversePort,
    SourceProviderPort,
    TimePort,
    LLMPort,
)

__all__ = [
    "AnalysisTarget",
    "PortError",
    "DataUnavailableError",
    "ScoringUnavailableError",
    "ExpertScoringPort",
    "MarketUniversePort",
    "SourceProviderPort",
    "TimePort",
    "LLMPort",
]
