"""
模拟资产池适配器 - 实现 MarketUniversePort

提供固定的候选类别与标的，用于演示与测试。
"""

import logging
from typing import Dict, List, Optional

from foliosight.domain.models import Asset, AssetCategory, SourceGrade
from foliosight.ports.interfaces import MarketUniversePort


logger = logging.getLogger(__name__)


AI_ML = "AI & 机器学习"
SEMICONDUCTOR = "半导体 & 硬件"
RENEWABLES = "可再生能源 & 气候科技"
BLOCKCHAIN = "区块链 & 数字资产"


def _default_categories() -> List[AssetCategory]:
    return [
        AssetCategory(
            name=AI_ML,
            growth_score=9.5,
            innovation_score=9.8,
            sustainability_score=8.5,
            trust_score=9.0,
            compound_potential=9.2,
            average_score=9.2,
            consensus_score=9.1,
            cagr=35,
            sharpe_ratio=1.2,
            max_drawdown=22,
        ),
        AssetCategory(
            name=SEMICONDUCTOR,
            growth_score=8.8,
            innovation_score=9.0,
            sustainability_score=7.5,
            trust_score=8.8,
            compound_potential=8.7,
            average_score=8.6,
            consensus_score=8.7,
            cagr=32,
            sharpe_ratio=1.1,
            max_drawdown=23,
        ),
        AssetCategory(
            name=RENEWABLES,
            growth_score=8.5,
            innovation_score=8.8,
            sustainability_score=9.8,
            trust_score=8.2,
            compound_potential=8.6,
            average_score=8.8,
            consensus_score=9.0,
            cagr=28,
            sharpe_ratio=0.9,
            max_drawdown=20,
        ),
        # 回撤过高，筛选时会被排除
        AssetCategory(
            name=BLOCKCHAIN,
            growth_score=7.8,
            innovation_score=9.2,
            sustainability_score=6.5,
            trust_score=7.0,
            compound_potential=7.8,
            average_score=7.7,
            consensus_score=7.6,
            cagr=40,
            sharpe_ratio=0.7,
            max_drawdown=45,
        ),
    ]


def _asset(category, ticker, name, industry, points, cagr, grade, current, buy, sell) -> Asset:
    return Asset(
        category=category,
        ticker=ticker,
        name=name,
        industry=industry,
        key_growth_points=points,
        expected_cagr=cagr,
        trust_grade=grade,
        current_price=current,
        buy_price=buy,
        sell_price=sell,
    )


def _default_assets() -> Dict[str, List[Asset]]:
    return {
        AI_ML: [
            _asset(AI_ML, "NVDA", "NVIDIA", "半导体",
                   ["GPU 市场主导地位", "AI 数据中心需求爆发", "Blackwell 架构"],
                   28, SourceGrade.A_PLUS, 500, 480, 700),
            _asset(AI_ML, "PLTR", "Palantir", "AI 数据分析",
                   ["国防/政府合同扩大", "AIP 平台增长", "企业 AI 需求"],
                   33, SourceGrade.A, 25, 24, 45),
            _asset(AI_ML, "MSFT", "Microsoft", "云计算 & AI",
                   ["Azure AI 增长", "OpenAI 合作", "Copilot 生态"],
                   25, SourceGrade.A_PLUS, 380, 375, 550),
        ],
        SEMICONDUCTOR: [
            _asset(SEMICONDUCTOR, "ASML", "ASML Holding", "半导体设备",
                   ["EUV 光刻垄断", "先进制程刚需", "中国市场复苏"],
                   30, SourceGrade.A, 800, 790, 1200),
            _asset(SEMICONDUCTOR, "AMD", "AMD", "半导体",
                   ["AI GPU 竞争力", "数据中心份额提升", "Xilinx 协同"],
                   32, SourceGrade.A, 140, 135, 250),
        ],
        RENEWABLES: [
            _asset(RENEWABLES, "ENPH", "Enphase Energy", "光伏",
                   ["微型逆变器市场第一", "家用储能", "IRA 受益"],
                   26, SourceGrade.B, 95, 90, 160),
            _asset(RENEWABLES, "TSLA", "Tesla", "电动车 & 能源",
                   ["EV 龙头", "储能业务", "FSD/Robotaxi"],
                   29, SourceGrade.A, 250, 245, 450),
        ],
    }


class MockUniverseAdapter(MarketUniversePort):
    """
    模拟资产池

    可通过构造参数替换类别与标的，便于测试不同的筛选场景。
    """

    def __init__(
        self,
        categories: Optional[List[AssetCategory]] = None,
        assets: Optional[Dict[str, List[Asset]]] = None,
    ):
        self._categories = list(categories) if categories is not None else _default_categories()
        self._assets = dict(assets) if assets is not None else _default_assets()

    def list_categories(self) -> List[AssetCategory]:
        return list(self._categories)

    def list_assets(self, category: str) -> List[Asset]:
        assets = self._assets.get(category)
        if assets is None:
            logger.debug(f"类别无候选标的: {category}")
            return []
        return list(assets)
