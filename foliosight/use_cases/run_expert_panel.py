"""
专家小组用例 - 8 位专家逐一打分并汇总共识
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence

from foliosight.domain.config import DEFAULT_CONFIG, PortfolioConfig
from foliosight.domain.experts import clamp_expert_score, create_expert_consensus, needs_debate
from foliosight.domain.models import Asset, AssetCategory, ExpertAnalysis, ExpertConsensus
from foliosight.ports.interfaces import AnalysisTarget, ExpertScoringPort
from foliosight.use_cases.base import UseCase


logger = logging.getLogger(__name__)


# 辩论钩子：返回新的分析列表即替换原结果，返回 None 保持不变
DebateHook = Callable[[List[ExpertAnalysis], AnalysisTarget, str], Optional[List[ExpertAnalysis]]]


class RunExpertPanelUseCase(UseCase[ExpertConsensus]):
    """
    专家小组

    打分来源由 ExpertScoringPort 注入；本用例负责：
    1. 按名册顺序调用每位专家
    2. 将分数限定在 [1, 10]
    3. 检测辩论条件（只记录，除非配置了 debate_hook）
    4. 汇总为 ExpertConsensus
    """

    def __init__(
        self,
        scoring_port: ExpertScoringPort,
        config: PortfolioConfig = DEFAULT_CONFIG,
        debate_hook: Optional[DebateHook] = None,
    ):
        self.scoring = scoring_port
        self.config = config
        self.debate_hook = debate_hook

    def _collect(self, target: AnalysisTarget, context: str) -> List[ExpertAnalysis]:
        analyses: List[ExpertAnalysis] = []
        for expert_type, profile in self.config.experts.items():
            analysis = self.scoring.analyze(expert_type, profile, target, context)
            score = clamp_expert_score(analysis.score, self.config)
            if score != analysis.score:
                analysis = replace(analysis, score=score)
            analyses.append(analysis)
        return analyses

    def run(self, target: AnalysisTarget, context: str) -> ExpertConsensus:
        """
        对单个标的或类别执行专家小组评估

        Args:
            target: 评估对象
            context: 评估语境

        Returns:
            ExpertConsensus: 专家共识

        Raises:
            ScoringUnavailableError: 打分后端不可用（直接向上传播）
        """
        analyses = self._collect(target, context)

        if needs_debate(analyses, config=self.config):
            logger.info(f"触发专家辩论: {target.name} 分数差超过 {self.config.panel.debate_spread} 分")
            if self.debate_hook is not None:
                revised = self.debate_hook(list(analyses), target, context)
                if revised is not None:
                    analyses = [
                        replace(a, score=clamp_expert_score(a.score, self.config))
                        for a in revised
                    ]

        return create_expert_consensus(analyses, self.config)

    def execute(self, target: AnalysisTarget, context: str) -> ExpertConsensus:
        return self.run(target, context)

    def analyze_categories(
        self,
        categories: Sequence[AssetCategory],
        context: str,
    ) -> Dict[str, ExpertConsensus]:
        """按类别名称返回共识"""
        return {category.name: self.run(category, context) for category in categories}

    def analyze_assets(self, assets: Sequence[Asset], context: str) -> Dict[str, ExpertConsensus]:
        """按 ticker 返回共识"""
        return {asset.ticker: self.run(asset, context) for asset in assets}


# 领域术语别名
ExpertPanel = RunExpertPanelUseCase
