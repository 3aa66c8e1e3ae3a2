"""
测试配置 - pytest 配置和公共 fixtures
"""

import pytest
from datetime import date, datetime
from unittest.mock import Mock

from foliosight.adapters.expert_scoring_adapter import FixtureExpertScoringAdapter
from foliosight.adapters.mock_source_adapter import MockSourceAdapter
from foliosight.adapters.mock_universe_adapter import MockUniverseAdapter
from foliosight.adapters.system_time_adapter import FixedTimeAdapter
from foliosight.domain.models import (
    Asset,
    AssetCategory,
    ExpertAnalysis,
    ExpertType,
    MisinfoType,
    Source,
    SourceGrade,
    UserContext,
)
from foliosight.orchestrator import create_orchestrator


FIXED_NOW = datetime(2025, 1, 15, 9, 30, 0)
FIXED_DATE = date(2025, 1, 15)


# ==================== 工厂 ====================

@pytest.fixture
def make_source():
    """按 TrustScore 直接构造出处（绕过评分计算）"""
    def _make(
        trust_score=80,
        cross_validation_count=3,
        misinfo_type=MisinfoType.VERIFIED,
        title=None,
        publisher="Bloomberg",
        recency=100,
    ):
        return Source(
            url=f"https://example.com/{trust_score}-{cross_validation_count}",
            title=title or f"Source {trust_score}/{cross_validation_count}",
            publisher=publisher,
            publish_date="2025-01-10",
            grade=SourceGrade.A,
            trust_score=trust_score,
            base_score=95,
            recency=recency,
            corroboration=85,
            author_credibility=95,
            transparency=100,
            correction_speed=50,
            conflict_of_interest=0,
            cross_validation_count=cross_validation_count,
            misinfo_type=misinfo_type,
            adopted_in_analysis=misinfo_type == MisinfoType.VERIFIED,
            reasoning="test",
        )
    return _make


@pytest.fixture
def make_analysis():
    """构造专家分析"""
    def _make(expert_type=ExpertType.ECONOMIST, score=8.0, key_points=None, concerns=None):
        return ExpertAnalysis(
            expert_type=expert_type,
            perspective=expert_type.value,
            key_points=key_points if key_points is not None else [f"{expert_type.value} 观点"],
            score=score,
            reasoning="test",
            concerns=concerns,
        )
    return _make


@pytest.fixture
def make_asset():
    """构造标的"""
    def _make(ticker="TEST", expected_cagr=30, category="测试类别", **kwargs):
        return Asset(
            category=category,
            ticker=ticker,
            name=kwargs.pop("name", f"{ticker} Inc."),
            industry=kwargs.pop("industry", "测试"),
            key_growth_points=kwargs.pop("key_growth_points", ["增长点"]),
            expected_cagr=expected_cagr,
            trust_grade=kwargs.pop("trust_grade", SourceGrade.A),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_category():
    """构造资产类别（缺省通过筛选）"""
    def _make(name="测试类别", average_score=8.5, consensus_score=8.5, cagr=30, max_drawdown=20):
        return AssetCategory(
            name=name,
            growth_score=8.5,
            innovation_score=8.5,
            sustainability_score=8.0,
            trust_score=8.0,
            compound_potential=8.5,
            average_score=average_score,
            consensus_score=consensus_score,
            cagr=cagr,
            sharpe_ratio=1.0,
            max_drawdown=max_drawdown,
        )
    return _make


# ==================== 端口 ====================

@pytest.fixture
def fixed_time():
    """固定时间适配器"""
    return FixedTimeAdapter(FIXED_NOW)


@pytest.fixture
def mock_time_port():
    """模拟时间端口"""
    port = Mock()
    port.get_current_datetime.return_value = FIXED_NOW
    port.get_formatted_datetime.return_value = FIXED_NOW.strftime("%Y-%m-%d %H:%M:%S")
    port.get_date.return_value = FIXED_NOW.strftime("%Y-%m-%d")
    return port


@pytest.fixture
def fixture_scoring():
    """固定分数的专家打分适配器（全员 8 分）"""
    return FixtureExpertScoringAdapter(default_score=8.0)


@pytest.fixture
def universe():
    return MockUniverseAdapter()


@pytest.fixture
def source_adapter():
    return MockSourceAdapter()


@pytest.fixture
def user_context():
    """测试用户画像"""
    return UserContext(
        name="tester",
        monthly_investment=1_000_000,
        total_investment_period=60,
        target_return=100_000_000,
        investment_style="成长型",
    )


# ==================== 编排器 ====================

@pytest.fixture
def orchestrator(fixed_time, fixture_scoring):
    """使用固定时间与固定分数的编排器"""
    return create_orchestrator(scoring_port=fixture_scoring, time_port=fixed_time)


@pytest.fixture
def full_report(orchestrator):
    """默认画像的完整报告"""
    return orchestrator.generate_full_report()
