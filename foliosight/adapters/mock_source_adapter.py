"""
模拟出处适配器 - 实现 SourceProviderPort

出处的发布日期相对参考日期计算，使最新性评分不随运行时间漂移。
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence

from foliosight.domain.config import DEFAULT_CONFIG, PortfolioConfig
from foliosight.domain.models import Source
from foliosight.domain.trust import create_source
from foliosight.ports.interfaces import SourceProviderPort


@dataclass(frozen=True)
class SourceSeed:
    """出处原始输入"""
    url: str
    title: str
    publisher: str
    days_ago: int
    cross_validation_count: int = 0
    has_data_source: bool = True
    has_citation: bool = True
    correction_hours: Optional[float] = None
    has_conflict: bool = False


DEFAULT_SOURCE_SEEDS = (
    SourceSeed(
        url="https://bloomberg.com/nvidia-ai-growth",
        title="NVIDIA AI Revenue Surges 200%",
        publisher="Bloomberg",
        days_ago=2,
        cross_validation_count=3,
    ),
    SourceSeed(
        url="https://reuters.com/semiconductor-outlook",
        title="Semiconductor Industry Outlook 2025",
        publisher="Reuters",
        days_ago=7,
        cross_validation_count=2,
    ),
)


class MockSourceAdapter(SourceProviderPort):
    """由 SourceSeed 列表生成已评分的出处"""

    def __init__(
        self,
        seeds: Optional[Sequence[SourceSeed]] = None,
        config: PortfolioConfig = DEFAULT_CONFIG,
    ):
        self.seeds = tuple(seeds) if seeds is not None else DEFAULT_SOURCE_SEEDS
        self.config = config

    def list_sources(self, as_of: date) -> List[Source]:
        return [
            create_source(
                url=seed.url,
                title=seed.title,
                publisher=seed.publisher,
                publish_date=(as_of - timedelta(days=seed.days_ago)).isoformat(),
                cross_validation_count=seed.cross_validation_count,
                has_data_source=seed.has_data_source,
                has_citation=seed.has_citation,
                correction_hours=seed.correction_hours,
                has_conflict=seed.has_conflict,
                as_of=as_of,
                config=self.config,
            )
            for seed in self.seeds
        ]
