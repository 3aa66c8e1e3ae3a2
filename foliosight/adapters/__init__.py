"""
适配器层 - 端口接口的具体实现

包含：
- MockUniverseAdapter: 模拟候选类别与标的
- MockSourceAdapter: 模拟出处
- MockExpertScoringAdapter: 随机扰动专家打分
- FixtureExpertScoringAdapter: 固定分数专家打分
- PromptExpertScoringAdapter: 基于 LLM 的专家打分
- SystemTimeAdapter / FixedTimeAdapter: 时间服务
"""

from foliosight.adapters.mock_universe_adapter import MockUniverseAdapter
from foliosight.adapters.mock_source_adapter import MockSourceAdapter, SourceSeed
from foliosight.adapters.expert_scoring_adapter import (
    MockExpertScoringAdapter,
    FixtureExpertScoringAdapter,
)
from foliosight.adapters.prompt_expert_adapter import (
    PromptExpertScoringAdapter,
    build_expert_prompt,
    parse_expert_response,
)
from foliosight.adapters.system_time_adapter import SystemTimeAdapter, FixedTimeAdapter

__all__ = [
    "MockUniverseAdapter",
    "MockSourceAdapter",
    "SourceSeed",
    "MockExpertScoringAdapter",
    "FixtureExpertScoringAdapter",
    "PromptExpertScoringAdapter",
    "build_expert_prompt",
    "parse_expert_response",
    "SystemTimeAdapter",
    "FixedTimeAdapter",
]
