"""
SAVL - 出处两层筛选

Layer 1 (Watchlist):  TrustScore >= 60
Layer 2 (Verified):   TrustScore >= 75 且交叉验证 >= 2 且判定为 VERIFIED

VERIFIED 层是报告最终出处列表的唯一入口。
"""

import hashlib
import logging
import re
from collections import Counter
from typing import Callable, List, Optional, Sequence

from foliosight.domain.config import DEFAULT_CONFIG, PortfolioConfig, SAVLThresholds
from foliosight.domain.models import MisinfoType, SAVLValidation, Source


logger = logging.getLogger(__name__)

Fingerprint = Callable[[Source], str]

_PUNCTUATION = re.compile(r"[^\w\s]", re.UNICODE)
_WHITESPACE = re.compile(r"\s+")


# ==================== 内容指纹 ====================

def content_fingerprint(source: Source) -> str:
    """
    出处内容指纹

    对标题做归一化（小写、去标点、合并空白）后取 sha256。
    可替换为基于正文的相似度哈希。
    """
    normalized = _PUNCTUATION.sub("", source.title.lower())
    normalized = _WHITESPACE.sub(" ", normalized).strip()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def apply_noise_gate_penalty(
    sources: Sequence[Source],
    fingerprint_value: str,
    fingerprint: Fingerprint = content_fingerprint,
    thresholds: SAVLThresholds = DEFAULT_CONFIG.savl,
) -> float:
    """同一内容出现 >= 3 次时返回 -30（%），否则 0"""
    duplicate_count = sum(1 for s in sources if fingerprint(s) == fingerprint_value)

    if duplicate_count >= thresholds.noise_gate_threshold:
        return thresholds.noise_gate_penalty
    return 0.0


def _noise_gate_for(
    sources: Sequence[Source],
    fingerprint: Fingerprint,
    thresholds: SAVLThresholds,
) -> float:
    if not sources:
        return 0.0

    counts = Counter(fingerprint(s) for s in sources)
    most_common, count = counts.most_common(1)[0]
    if count >= thresholds.noise_gate_threshold:
        logger.info(f"NoiseGate 触发: 同一内容重复 {count} 次")
        return apply_noise_gate_penalty(sources, most_common, fingerprint, thresholds)
    return 0.0


# ==================== 机会分数 ====================

def calculate_opportunity_score(
    growth_signal: float,
    trust_score: float,
    recency_score: float,
    volatility_context: float,
) -> float:
    """OpportunityScore = 0.3×Growth + 0.4×Trust + 0.2×Recency + 0.1×Volatility"""
    return (
        0.3 * growth_signal
        + 0.4 * trust_score
        + 0.2 * recency_score
        + 0.1 * volatility_context
    )


# ==================== 两层筛选 ====================

def _is_verified(source: Source, thresholds: SAVLThresholds) -> bool:
    return (
        source.trust_score >= thresholds.verified_min
        and source.cross_validation_count >= thresholds.cross_validation_min
        and source.misinfo_type == MisinfoType.VERIFIED
    )


def perform_savl_validation(
    sources: Sequence[Source],
    growth_signal: Optional[float] = None,
    volatility_context: Optional[float] = None,
    fingerprint: Fingerprint = content_fingerprint,
    config: PortfolioConfig = DEFAULT_CONFIG,
) -> SAVLValidation:
    """
    执行 SAVL 两层筛选

    Args:
        sources: 待筛选出处
        growth_signal: 成长信号常量（缺省取配置值 70）
        volatility_context: 波动率语境常量（缺省取配置值 60）
        fingerprint: 内容指纹函数，用于 NoiseGate 去重

    Returns:
        SAVLValidation: 两层列表、机会分数与 NoiseGate 惩罚
    """
    thresholds = config.savl
    growth = thresholds.growth_signal if growth_signal is None else growth_signal
    volatility = thresholds.volatility_context if volatility_context is None else volatility_context

    watchlist = [s for s in sources if s.trust_score >= thresholds.watchlist_min]
    verified = [s for s in sources if _is_verified(s, thresholds)]

    if verified:
        opportunity_score = sum(
            calculate_opportunity_score(growth, s.trust_score, s.recency, volatility)
            for s in verified
        ) / len(verified)
    else:
        opportunity_score = 0.0

    noise_gate_penalty = _noise_gate_for(sources, fingerprint, thresholds)

    logger.debug(
        f"SAVL 完成: 输入 {len(sources)}，watchlist {len(watchlist)}，"
        f"verified {len(verified)}"
    )

    return SAVLValidation(
        watchlist=watchlist,
        verified=verified,
        opportunity_score=opportunity_score,
        noise_gate_penalty=noise_gate_penalty,
    )


# ==================== 排序与回溯 ====================

def sort_sources_by_trust(sources: Sequence[Source]) -> List[Source]:
    """按 TrustScore 降序（稳定排序，不修改输入）"""
    return sorted(sources, key=lambda s: s.trust_score, reverse=True)


def filter_and_sort_sources(
    sources: Sequence[Source],
    min_trust_score: Optional[float] = None,
    thresholds: SAVLThresholds = DEFAULT_CONFIG.savl,
) -> List[Source]:
    """保留达到分数线且为 VERIFIED 的出处，按 TrustScore 降序"""
    minimum = thresholds.verified_min if min_trust_score is None else min_trust_score
    return sort_sources_by_trust([
        s for s in sources
        if s.trust_score >= minimum and s.misinfo_type == MisinfoType.VERIFIED
    ])


def perform_source_backtracking(
    sources: Sequence[Source],
    top_n: Optional[int] = None,
    thresholds: SAVLThresholds = DEFAULT_CONFIG.savl,
) -> List[Source]:
    """
    复查 TrustScore 前 N 的出处

    未通过 Verified 门槛的出处只记录警告，不做替换。
    """
    limit = thresholds.backtracking_top_n if top_n is None else top_n
    top_sources = sort_sources_by_trust(sources)[:limit]

    for source in top_sources:
        if (source.trust_score < thresholds.verified_min
                or source.misinfo_type != MisinfoType.VERIFIED):
            logger.warning(
                f"出处需要替换: {source.title} - TrustScore: {source.trust_score}"
            )

    return top_sources
