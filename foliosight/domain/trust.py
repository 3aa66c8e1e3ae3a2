"""
TrustScorer - 出处信任度评分

TrustScore = 0.35×BS + 0.15×Recency + 0.15×Corroboration + 0.15×AuthorCred
             + 0.10×Transparency + 0.05×Correction − 0.05×|COI|

各子分数由独立的分段函数得出，缺失输入一律使用兜底值。
"""

import logging
from datetime import date, datetime
from typing import Dict, Optional, Union

from foliosight.domain.calculator import clamp, round_half_up
from foliosight.domain.config import (
    DEFAULT_CONFIG,
    PortfolioConfig,
    PublisherTiers,
    TrustScoreWeights,
)
from foliosight.domain.models import (
    MisinfoType,
    Source,
    SourceGrade,
    TrustSubscores,
)


logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime]


def _to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ==================== 总分 ====================

def calculate_trust_score(
    subscores: Union[TrustSubscores, Dict[str, float], None] = None,
    weights: TrustScoreWeights = DEFAULT_CONFIG.trust_weights,
) -> float:
    """
    计算 TrustScore（0-100）

    Args:
        subscores: 子分数；可传部分字段的字典，缺失字段取兜底值
        weights: 加权系数

    Returns:
        float: 限定在 [0, 100] 的分数
    """
    if subscores is None:
        subscores = TrustSubscores()
    elif isinstance(subscores, dict):
        subscores = TrustSubscores(**{
            k: v for k, v in subscores.items()
            if k in TrustSubscores.__dataclass_fields__ and v is not None
        })

    score = (
        weights.base_score * subscores.base_score
        + weights.recency * subscores.recency
        + weights.corroboration * subscores.corroboration
        + weights.author_credibility * subscores.author_credibility
        + weights.transparency * subscores.transparency
        + weights.correction_speed * subscores.correction_speed
        + weights.conflict_of_interest * subscores.conflict_of_interest
    )

    return clamp(score)


# ==================== 子分数 ====================

def calculate_recency_score(publish_date: DateLike, as_of: Optional[DateLike] = None) -> float:
    """最新性评分：发布距今天数越少分数越高"""
    reference = _to_date(as_of) if as_of is not None else date.today()

    try:
        published = _to_date(publish_date)
    except (TypeError, ValueError):
        logger.warning(f"无法解析发布日期: {publish_date!r}，按最低最新性处理")
        return 20

    days_diff = (reference - published).days

    if days_diff <= 7:
        return 100
    if days_diff <= 30:
        return 90
    if days_diff <= 90:
        return 75
    if days_diff <= 180:
        return 60
    if days_diff <= 365:
        return 40
    return 20


def calculate_corroboration_score(cross_validation_count: int) -> float:
    """交叉验证评分"""
    if cross_validation_count >= 5:
        return 100
    if cross_validation_count >= 3:
        return 85
    if cross_validation_count >= 2:
        return 70
    if cross_validation_count >= 1:
        return 50
    return 30


def calculate_author_credibility_score(
    publisher: str,
    tiers: PublisherTiers = DEFAULT_CONFIG.publisher_tiers,
) -> float:
    """作者/出版方可信度（按分级查表）"""
    if publisher in tiers.tier_1:
        return 95
    if publisher in tiers.tier_2:
        return 80
    if publisher in tiers.tier_3:
        return 65
    return 50


def calculate_transparency_score(has_data_source: bool, has_citation: bool) -> float:
    """透明度：数据来源与引用各加 25 分"""
    score = 50
    if has_data_source:
        score += 25
    if has_citation:
        score += 25
    return score


def calculate_correction_speed_score(correction_hours: Optional[float]) -> float:
    """更正速度：无更正记录为中性 50"""
    if correction_hours is None:
        return 50
    if correction_hours <= 24:
        return 85
    if correction_hours <= 72:
        return 35
    return 15


def calculate_conflict_of_interest_score(has_conflict: bool) -> float:
    """利益冲突：存在冲突记 -30"""
    return -30 if has_conflict else 0


# ==================== 判定 ====================

def determine_source_grade(
    publisher: str,
    trust_score: float,
    tiers: PublisherTiers = DEFAULT_CONFIG.publisher_tiers,
) -> SourceGrade:
    """
    出处等级

    Tier 1 出版方直接为 A+ 或 A；Tier 2 使用 85/75 分界；
    其他出版方使用 90/80/70 分界。
    """
    if publisher in tiers.tier_1:
        return SourceGrade.A_PLUS if trust_score >= 90 else SourceGrade.A

    if publisher in tiers.tier_2:
        if trust_score >= 85:
            return SourceGrade.A
        if trust_score >= 75:
            return SourceGrade.B
        return SourceGrade.C

    if trust_score >= 90:
        return SourceGrade.A_PLUS
    if trust_score >= 80:
        return SourceGrade.A
    if trust_score >= 70:
        return SourceGrade.B
    return SourceGrade.C


def determine_misinfo_type(
    trust_score: float,
    cross_validation_count: int,
    config: PortfolioConfig = DEFAULT_CONFIG,
) -> MisinfoType:
    """VERIFIED 当且仅当 TrustScore >= 75 且交叉验证 >= 2"""
    if (trust_score >= config.savl.verified_min
            and cross_validation_count >= config.savl.cross_validation_min):
        return MisinfoType.VERIFIED

    if trust_score < 50:
        return MisinfoType.FALSE_LIKELY

    return MisinfoType.DISPUTED


# ==================== 工厂 ====================

def create_source(
    url: str,
    title: str,
    publisher: str,
    publish_date: DateLike,
    cross_validation_count: int = 0,
    has_data_source: bool = True,
    has_citation: bool = True,
    correction_hours: Optional[float] = None,
    has_conflict: bool = False,
    as_of: Optional[DateLike] = None,
    config: PortfolioConfig = DEFAULT_CONFIG,
) -> Source:
    """
    由原始输入创建 Source

    基础分取出版方可信度；TrustScore 先取整，等级与真实性判定基于取整后的分数。

    Args:
        as_of: 计算最新性的参考日期（缺省为今天）
    """
    recency = calculate_recency_score(publish_date, as_of)
    corroboration = calculate_corroboration_score(cross_validation_count)
    author_credibility = calculate_author_credibility_score(publisher, config.publisher_tiers)
    transparency = calculate_transparency_score(has_data_source, has_citation)
    correction_speed = calculate_correction_speed_score(correction_hours)
    conflict = calculate_conflict_of_interest_score(has_conflict)

    base_score = author_credibility

    raw_score = calculate_trust_score(
        TrustSubscores(
            base_score=base_score,
            recency=recency,
            corroboration=corroboration,
            author_credibility=author_credibility,
            transparency=transparency,
            correction_speed=correction_speed,
            conflict_of_interest=conflict,
        ),
        config.trust_weights,
    )
    trust_score = int(round_half_up(raw_score))

    grade = determine_source_grade(publisher, trust_score, config.publisher_tiers)
    misinfo_type = determine_misinfo_type(trust_score, cross_validation_count, config)

    published = publish_date if isinstance(publish_date, str) else _to_date(publish_date).isoformat()

    return Source(
        url=url,
        title=title,
        publisher=publisher,
        publish_date=published,
        grade=grade,
        trust_score=trust_score,
        base_score=base_score,
        recency=recency,
        corroboration=corroboration,
        author_credibility=author_credibility,
        transparency=transparency,
        correction_speed=correction_speed,
        conflict_of_interest=conflict,
        cross_validation_count=cross_validation_count,
        misinfo_type=misinfo_type,
        adopted_in_analysis=misinfo_type == MisinfoType.VERIFIED,
        reasoning=(
            f"TrustScore {trust_score}, {cross_validation_count} 个交叉验证, "
            f"{misinfo_type.value}"
        ),
    )
