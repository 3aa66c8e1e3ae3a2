"""
Use Cases 单元测试
"""

import logging

import pytest
from datetime import date
from unittest.mock import Mock

from foliosight.adapters import FixtureExpertScoringAdapter, MockUniverseAdapter
from foliosight.adapters.mock_universe_adapter import AI_ML, BLOCKCHAIN, RENEWABLES, SEMICONDUCTOR
from foliosight.domain.config import DEFAULT_CONFIG
from foliosight.domain.models import ExpertType, MisinfoType, RiskLevel, StrategyType
from foliosight.infrastructure.errors import PortfolioConstructionError
from foliosight.ports.interfaces import ScoringUnavailableError
from foliosight.use_cases import (
    GeneratePortfolioUseCase,
    RunExpertPanelUseCase,
    ValidateSourcesUseCase,
    build_panel_context,
)


class TestRunExpertPanelUseCase:
    """RunExpertPanelUseCase 测试类"""

    def test_all_experts_in_roster_order(self, fixture_scoring, make_asset):
        panel = RunExpertPanelUseCase(fixture_scoring)

        consensus = panel.execute(make_asset(name="Alpha"), "context")

        assert [call[0] for call in fixture_scoring.calls] == list(DEFAULT_CONFIG.experts)
        assert len(consensus.analyses) == 8
        assert consensus.consensus_score == 8.0
        assert consensus.bias_guard_triggered is True
        assert consensus.debate_triggered is False

    def test_scores_are_clamped(self, make_asset):
        scoring = FixtureExpertScoringAdapter(scores={ExpertType.ECONOMIST: 12, ExpertType.FUTURIST: -3})

        consensus = RunExpertPanelUseCase(scoring).run(make_asset(), "")
        scores = {a.expert_type: a.score for a in consensus.analyses}

        assert scores[ExpertType.ECONOMIST] == 10
        assert scores[ExpertType.FUTURIST] == 1

    def test_debate_without_hook_is_flagged(self, make_asset, caplog):
        scoring = FixtureExpertScoringAdapter(scores={ExpertType.ECONOMIST: 2})

        with caplog.at_level(logging.INFO):
            consensus = RunExpertPanelUseCase(scoring).run(make_asset(name="Alpha"), "")

        assert consensus.debate_triggered is True
        assert "触发专家辩论: Alpha" in caplog.text

    def test_debate_hook_revises_scores(self, make_asset):
        from dataclasses import replace

        scoring = FixtureExpertScoringAdapter(scores={ExpertType.ECONOMIST: 2})
        hook = Mock(side_effect=lambda analyses, target, context: [
            replace(a, score=8.0) for a in analyses
        ])

        consensus = RunExpertPanelUseCase(scoring, debate_hook=hook).run(make_asset(), "ctx")

        hook.assert_called_once()
        assert consensus.debate_triggered is False
        assert consensus.consensus_score == 8.0

    def test_debate_hook_returning_none_keeps_scores(self, make_asset):
        scoring = FixtureExpertScoringAdapter(scores={ExpertType.ECONOMIST: 2})
        hook = Mock(return_value=None)

        consensus = RunExpertPanelUseCase(scoring, debate_hook=hook).run(make_asset(), "")

        hook.assert_called_once()
        assert consensus.debate_triggered is True

    def test_hook_not_called_without_debate(self, fixture_scoring, make_asset):
        hook = Mock()
        RunExpertPanelUseCase(fixture_scoring, debate_hook=hook).run(make_asset(), "")
        hook.assert_not_called()

    def test_analyze_categories_and_assets(self, fixture_scoring, make_asset, make_category):
        panel = RunExpertPanelUseCase(fixture_scoring)

        by_category = panel.analyze_categories([make_category(name="c1"), make_category(name="c2")], "")
        by_asset = panel.analyze_assets([make_asset("AAA"), make_asset("BBB")], "")

        assert set(by_category) == {"c1", "c2"}
        assert set(by_asset) == {"AAA", "BBB"}

    def test_scoring_failure_propagates(self, make_asset):
        scoring = Mock()
        scoring.analyze.side_effect = ScoringUnavailableError("down", source="llm")

        with pytest.raises(ScoringUnavailableError):
            RunExpertPanelUseCase(scoring).run(make_asset(), "")


class TestValidateSourcesUseCase:
    """ValidateSourcesUseCase 测试类"""

    def test_uses_time_port_date(self, mock_time_port, make_source):
        port = Mock()
        port.list_sources.return_value = [
            make_source(trust_score=80),
            make_source(trust_score=65, misinfo_type=MisinfoType.DISPUTED),
        ]

        result = ValidateSourcesUseCase(port, mock_time_port).execute()

        port.list_sources.assert_called_once_with(date(2025, 1, 15))
        assert len(result.watchlist) == 2
        assert len(result.verified) == 1

    def test_explicit_as_of(self, mock_time_port):
        port = Mock()
        port.list_sources.return_value = []

        ValidateSourcesUseCase(port, mock_time_port).execute(as_of=date(2024, 6, 1))

        port.list_sources.assert_called_once_with(date(2024, 6, 1))

    def test_backtracking_failure_is_contained(self, mock_time_port, make_source, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("backtracking failed")

        monkeypatch.setattr("foliosight.use_cases.validate_sources.perform_source_backtracking", boom)
        port = Mock()
        port.list_sources.return_value = [make_source(trust_score=80)]

        result = ValidateSourcesUseCase(port, mock_time_port).execute()

        assert len(result.verified) == 1


class TestGeneratePortfolioUseCase:
    """GeneratePortfolioUseCase 测试类"""

    @pytest.fixture
    def use_case(self, universe, fixture_scoring, mock_time_port):
        return GeneratePortfolioUseCase(
            universe_port=universe,
            expert_panel=RunExpertPanelUseCase(fixture_scoring),
            time_port=mock_time_port,
        )

    def test_default_universe(self, use_case, user_context, fixture_scoring):
        plan = use_case.execute(user_context)

        assert [c.name for c in plan.selected_categories] == [AI_ML, SEMICONDUCTOR, RENEWABLES]
        assert all(c.selected for c in plan.selected_categories)
        assert [a.ticker for a in plan.top_assets] == ["PLTR", "NVDA", "AMD", "ASML", "TSLA", "ENPH"]

        portfolio = plan.portfolio
        assert sum(a.allocation for a in portfolio.allocations) == pytest.approx(100, abs=0.1)
        assert portfolio.total_investment == user_context.monthly_investment
        assert portfolio.user_id == "tester"
        assert portfolio.risk_level == RiskLevel.MEDIUM
        assert portfolio.strategy_type == StrategyType.CONSERVATIVE
        assert 0 < portfolio.diversification_score <= 100

        # 专家小组评估首个标的
        assert {call[1] for call in fixture_scoring.calls} == {"Palantir"}

    def test_blockchain_is_screened_out(self, use_case, user_context):
        plan = use_case.execute(user_context)
        assert BLOCKCHAIN not in [c.name for c in plan.selected_categories]

    def test_assets_per_category(self, use_case, user_context):
        plan = use_case.execute(user_context, assets_per_category=1)
        assert [a.ticker for a in plan.top_assets] == ["PLTR", "AMD", "TSLA"]

    def test_explicit_zero_assets_per_category(self, use_case, user_context):
        with pytest.raises(PortfolioConstructionError) as exc_info:
            use_case.execute(user_context, assets_per_category=0)

        assert exc_info.value.details["stage"] == "asset_selection"

    def test_no_eligible_category(self, fixture_scoring, mock_time_port, user_context, make_category):
        universe = MockUniverseAdapter(categories=[make_category(max_drawdown=45)])
        use_case = GeneratePortfolioUseCase(universe, RunExpertPanelUseCase(fixture_scoring), mock_time_port)

        with pytest.raises(PortfolioConstructionError) as exc_info:
            use_case.execute(user_context)

        assert exc_info.value.details["stage"] == "category_screening"

    def test_no_assets(self, fixture_scoring, mock_time_port, user_context):
        universe = MockUniverseAdapter(assets={})
        use_case = GeneratePortfolioUseCase(universe, RunExpertPanelUseCase(fixture_scoring), mock_time_port)

        with pytest.raises(PortfolioConstructionError) as exc_info:
            use_case.execute(user_context)

        assert exc_info.value.details["stage"] == "asset_selection"


def test_build_panel_context(user_context):
    context = build_panel_context(user_context)

    assert "投资者: tester" in context
    assert "1,000,000" in context
    assert "投资风格: 成长型" in context
