"""
专家共识 - 加权平均、BiasGuard、辩论触发、异议与核心理由

打分来源由外部注入（ExpertScoringPort），本模块只做聚合，不含随机性。
"""

import logging
from typing import Dict, List, Optional, Sequence

from foliosight.domain.calculator import clamp, round_half_up
from foliosight.domain.config import DEFAULT_CONFIG, PortfolioConfig
from foliosight.domain.models import ExpertAnalysis, ExpertConsensus, ExpertType


logger = logging.getLogger(__name__)


def clamp_expert_score(score: float, config: PortfolioConfig = DEFAULT_CONFIG) -> float:
    """专家分数限制在 [1, 10]"""
    return clamp(score, config.panel.min_score, config.panel.max_score)


def calculate_consensus_score(
    analyses: Sequence[ExpertAnalysis],
    weights: Optional[Dict[ExpertType, float]] = None,
) -> float:
    """按专家权重的加权平均；权重和为 0 时返回 0"""
    if weights is None:
        weights = DEFAULT_CONFIG.expert_weights

    weighted_sum = 0.0
    total_weight = 0.0

    for analysis in analyses:
        weight = weights.get(analysis.expert_type, 0.0)
        weighted_sum += analysis.score * weight
        total_weight += weight

    return weighted_sum / total_weight if total_weight > 0 else 0.0


def check_bias_guard(
    analyses: Sequence[ExpertAnalysis],
    threshold: Optional[float] = None,
    config: PortfolioConfig = DEFAULT_CONFIG,
) -> bool:
    """给出正面评价（>= 7）的专家比例达到阈值时触发"""
    if not analyses:
        return False

    limit = config.goals.bias_guard_threshold if threshold is None else threshold
    positive_count = sum(1 for a in analyses if a.score >= config.panel.positive_score)
    return positive_count / len(analyses) >= limit


def needs_debate(
    analyses: Sequence[ExpertAnalysis],
    spread: Optional[float] = None,
    config: PortfolioConfig = DEFAULT_CONFIG,
) -> bool:
    """最高分与最低分之差严格大于 3 时需要辩论"""
    if len(analyses) < 2:
        return False

    limit = config.panel.debate_spread if spread is None else spread
    scores = [a.score for a in analyses]
    return max(scores) - min(scores) > limit


def extract_dissenting_opinion(
    analyses: Sequence[ExpertAnalysis],
    config: PortfolioConfig = DEFAULT_CONFIG,
) -> Optional[str]:
    """最低分专家的第一条担忧，前缀为其角色描述"""
    if not analyses:
        return None

    lowest = min(analyses, key=lambda a: a.score)
    if not lowest.concerns:
        return None

    profile = config.experts.get(lowest.expert_type)
    role = profile.role if profile else lowest.perspective
    return f"{role}: {lowest.concerns[0]}"


def extract_top_reasons(analyses: Sequence[ExpertAnalysis], limit: Optional[int] = None) -> List[str]:
    """按首次出现顺序去重后的前 N 条核心观点"""
    if limit is None:
        limit = DEFAULT_CONFIG.panel.top_reasons_limit

    # dict 保持插入顺序
    unique_points = dict.fromkeys(
        point for analysis in analyses for point in analysis.key_points
    )
    return list(unique_points)[:limit]


def create_expert_consensus(
    analyses: Sequence[ExpertAnalysis],
    config: PortfolioConfig = DEFAULT_CONFIG,
) -> ExpertConsensus:
    """汇总专家分析为共识结果"""
    analyses = list(analyses)
    consensus_score = calculate_consensus_score(analyses, config.expert_weights)

    return ExpertConsensus(
        analyses=analyses,
        consensus_score=round_half_up(consensus_score, 1),
        top_reasons=extract_top_reasons(analyses, config.panel.top_reasons_limit),
        dissenting_opinion=extract_dissenting_opinion(analyses, config),
        bias_guard_triggered=check_bias_guard(analyses, config=config),
        debate_triggered=needs_debate(analyses, config=config),
    )
