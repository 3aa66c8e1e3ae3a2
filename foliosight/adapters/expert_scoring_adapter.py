"""
专家打分适配器 - 实现 ExpertScoringPort

- MockExpertScoringAdapter: 基准分 ± 随机扰动，用于演示
- FixtureExpertScoringAdapter: 按专家类型固定分数，用于测试
"""

import random
from dataclasses import replace
from typing import Dict, List, Optional

from foliosight.domain.calculator import clamp, round_half_up
from foliosight.domain.models import ExpertAnalysis, ExpertProfile, ExpertType
from foliosight.ports.interfaces import AnalysisTarget, ExpertScoringPort


DEFAULT_CONCERNS = ["短期波动风险", "市场不确定性"]


def _criterion(profile: ExpertProfile, index: int) -> str:
    if index < len(profile.criteria):
        return profile.criteria[index]
    return profile.criteria[0] if profile.criteria else profile.role


def build_template_analysis(
    expert_type: ExpertType,
    profile: ExpertProfile,
    target: AnalysisTarget,
    score: float,
    concern_score: float = 7,
) -> ExpertAnalysis:
    """
    按评估维度生成模板化分析

    3 条核心观点取自专家的评估维度；分数低于 concern_score 时附带担忧。
    """
    name = target.name
    key_points = [
        f"{name} 的{_criterion(profile, 0)}分析结果积极",
        f"{_criterion(profile, 1)}方面确认具备成长潜力",
        f"长期来看{_criterion(profile, 2)}前景看好",
    ]
    verdict = "积极" if score >= concern_score else "一般"

    return ExpertAnalysis(
        expert_type=expert_type,
        perspective=profile.role,
        key_points=key_points,
        score=score,
        reasoning=(
            f"从{profile.role}的视角分析 {name}，"
            f"在{'、'.join(profile.criteria)}方面评价{verdict}。"
        ),
        concerns=list(DEFAULT_CONCERNS) if score < concern_score else None,
    )


class MockExpertScoringAdapter(ExpertScoringPort):
    """
    随机扰动打分

    分数 = base_score + U(-jitter, +jitter)，限定在 [1, 10] 后保留 1 位小数。
    传入 seed 可复现。
    """

    def __init__(
        self,
        base_score: float = 7.5,
        jitter: float = 1.0,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.base_score = base_score
        self.jitter = jitter
        self.rng = rng if rng is not None else random.Random(seed)

    def analyze(
        self,
        expert_type: ExpertType,
        profile: ExpertProfile,
        target: AnalysisTarget,
        context: str,
    ) -> ExpertAnalysis:
        variance = self.rng.uniform(-self.jitter, self.jitter)
        score = round_half_up(clamp(self.base_score + variance, 1, 10), 1)
        return build_template_analysis(expert_type, profile, target, score)


class FixtureExpertScoringAdapter(ExpertScoringPort):
    """
    固定分数打分

    未配置的专家类型使用 default_score；calls 记录调用顺序。
    """

    def __init__(
        self,
        scores: Optional[Dict[ExpertType, float]] = None,
        default_score: float = 8.0,
        concerns: Optional[Dict[ExpertType, List[str]]] = None,
    ):
        self.scores = dict(scores or {})
        self.default_score = default_score
        self.concerns = dict(concerns or {})
        self.calls: List[tuple] = []

    def analyze(
        self,
        expert_type: ExpertType,
        profile: ExpertProfile,
        target: AnalysisTarget,
        context: str,
    ) -> ExpertAnalysis:
        self.calls.append((expert_type, target.name))
        score = self.scores.get(expert_type, self.default_score)
        analysis = build_template_analysis(expert_type, profile, target, score)

        if expert_type in self.concerns:
            return replace(analysis, concerns=list(self.concerns[expert_type]))
        return analysis
