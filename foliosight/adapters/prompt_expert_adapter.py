"""
提示词专家适配器 - 基于 LLMPort 实现 ExpertScoringPort

为每位专家构造提示词，调用 LLM 并把自由文本解析为 ExpertAnalysis。
"""

import logging
import re
from typing import List, Optional

from foliosight.domain.calculator import clamp
from foliosight.domain.models import Asset, ExpertAnalysis, ExpertProfile, ExpertType
from foliosight.infrastructure.errors import retry
from foliosight.ports.interfaces import (
    AnalysisTarget,
    ExpertScoringPort,
    LLMPort,
    PortError,
    ScoringUnavailableError,
)


logger = logging.getLogger(__name__)


DEFAULT_SCORE = 7
MAX_KEY_POINTS = 5
MAX_REASONING_CHARS = 500

EXPERT_PROMPT_TEMPLATE = """你是一位{role}专家。
评估维度: {criteria}

请分析以下投资对象:
{target_info}

背景:
{context}

请按以下格式回答:
1. 核心观点（3-5 条，以 - 开头）
2. 分数: (1-10)
3. 详细依据（2-3 句）
4. 担忧:（如有，1-2 条，以 - 开头）

目标: 长期价值投资（5 年以上），CAGR 30% 以上，低风险"""

_SCORE_PATTERN = re.compile(r"(?:分数|评分|Score)\s*[:：]\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
_KEY_POINTS_HEADER = re.compile(r"核心|Key\s*Points", re.IGNORECASE)
_SECTION_END = re.compile(r"分数|评分|依据|担忧|Score|Reasoning|Concerns", re.IGNORECASE)
_CONCERNS_SECTION = re.compile(r"(?:担忧|Concerns)[^\n]*?[:：](.*?)(?:\n\s*\n|$)", re.IGNORECASE | re.DOTALL)
_BULLET = re.compile(r"^(?:[-•]|\d+\.)\s*")


def _describe_target(target: AnalysisTarget) -> str:
    if isinstance(target, Asset):
        return (
            f"标的: {target.name} ({target.ticker})\n"
            f"行业: {target.industry}\n"
            f"主要成长点: {', '.join(target.key_growth_points)}\n"
            f"预期 CAGR: {target.expected_cagr}%"
        )
    return (
        f"资产类别: {target.name}\n"
        f"成长性: {target.growth_score}/10\n"
        f"创新性: {target.innovation_score}/10"
    )


def build_expert_prompt(profile: ExpertProfile, target: AnalysisTarget, context: str) -> str:
    """构造专家提示词"""
    return EXPERT_PROMPT_TEMPLATE.format(
        role=profile.role,
        criteria=", ".join(profile.criteria),
        target_info=_describe_target(target),
        context=context,
    )


def _extract_key_points(lines: List[str]) -> List[str]:
    key_points: List[str] = []
    in_key_points = False

    for line in lines:
        is_bullet = line.startswith(("-", "•"))
        if not is_bullet and _KEY_POINTS_HEADER.search(line):
            in_key_points = True
            continue
        if not in_key_points:
            continue
        if is_bullet:
            key_points.append(_BULLET.sub("", line).strip())
        elif _SECTION_END.search(line):
            in_key_points = False

    return key_points[:MAX_KEY_POINTS]


def _extract_concerns(response: str) -> Optional[List[str]]:
    match = _CONCERNS_SECTION.search(response)
    if not match:
        return None

    concerns = [
        _BULLET.sub("", line.strip()).strip()
        for line in match.group(1).splitlines()
        if line.strip().startswith(("-", "•"))
    ]
    return concerns or None


def parse_expert_response(
    expert_type: ExpertType,
    profile: ExpertProfile,
    response: str,
) -> ExpertAnalysis:
    """
    解析 LLM 输出

    - 分数: 匹配 "分数: N" / "Score: N"，缺失时取 7，并限定在 [1, 10]
    - 核心观点: 核心观点段落内的列表项，最多 5 条
    - 担忧: 担忧段落内的列表项，没有则为 None
    - 依据: 原文前 500 个字符
    """
    lines = [line.strip() for line in response.splitlines() if line.strip()]

    score_match = _SCORE_PATTERN.search(response)
    score = float(score_match.group(1)) if score_match else DEFAULT_SCORE

    return ExpertAnalysis(
        expert_type=expert_type,
        perspective=profile.role,
        key_points=_extract_key_points(lines),
        score=clamp(score, 1, 10),
        reasoning=response[:MAX_REASONING_CHARS],
        concerns=_extract_concerns(response),
    )


class PromptExpertScoringAdapter(ExpertScoringPort):
    """
    基于 LLM 的专家打分

    LLM 调用失败统一转换为 ScoringUnavailableError，并按 max_attempts 重试。
    """

    def __init__(self, llm: LLMPort, max_attempts: int = 2, retry_delay: float = 1.0):
        self.llm = llm
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    def _complete_once(self, prompt: str) -> str:
        try:
            return self.llm.complete(prompt)
        except PortError:
            raise
        except Exception as e:
            raise ScoringUnavailableError(str(e), source="llm") from e

    def analyze(
        self,
        expert_type: ExpertType,
        profile: ExpertProfile,
        target: AnalysisTarget,
        context: str,
    ) -> ExpertAnalysis:
        prompt = build_expert_prompt(profile, target, context)

        complete = retry(
            max_attempts=self.max_attempts,
            delay=self.retry_delay,
            exceptions=(ScoringUnavailableError,),
        )(self._complete_once)

        try:
            response = complete(prompt)
        except ScoringUnavailableError as e:
            logger.error(f"专家打分调用失败 ({expert_type.value}): {e}")
            raise

        return parse_expert_response(expert_type, profile, response)
