"""
完整报告流程集成测试 - 模拟适配器 + 固定时间
"""

import pytest
from unittest.mock import Mock

from foliosight import create_orchestrator, create_report_writer
from foliosight.adapters import FixtureExpertScoringAdapter
from foliosight.domain.config import DEFAULT_USER_CONTEXT
from foliosight.domain.models import ErrorCode, ExpertType, MisinfoType
from foliosight.infrastructure.errors import ValidationError
from foliosight.ports.interfaces import ScoringUnavailableError


class TestFullReport:
    """默认画像的完整报告"""

    def test_report_structure(self, full_report):
        assert full_report.metadata.report_date == "2025-01-15"
        assert full_report.metadata.version == "v4.2"
        assert full_report.metadata.monthly_investment == 3_000_000
        assert full_report.metadata.five_year_goal == 1_000_000_000
        assert full_report.user_context.current_date == "2025-01-15"
        assert DEFAULT_USER_CONTEXT.current_date is None

    def test_sources_are_verified_only(self, full_report):
        assert full_report.sources == full_report.source_validation.verified
        assert all(s.misinfo_type == MisinfoType.VERIFIED for s in full_report.sources)
        assert [s.publisher for s in full_report.sources] == ["Bloomberg", "Reuters"]

    def test_compound_matches_portfolio(self, full_report):
        compound = full_report.compound_calculation

        assert compound.total_invested == 180_000_000
        assert compound.cagr == pytest.approx(full_report.portfolio.target_cagr)
        assert len(compound.yearly_breakdown) == 5

    def test_simulation(self, full_report):
        simulation = full_report.simulation
        base = simulation.scenarios[1]

        assert base.expected_return == full_report.compound_calculation.total_return
        assert simulation.weighted_roi == pytest.approx(base.expected_return, abs=1)

    def test_consensus_shared_with_portfolio(self, full_report):
        assert full_report.expert_consensus is full_report.portfolio.expert_consensus
        assert full_report.expert_consensus.consensus_score == 8.0

    def test_feasibility(self, orchestrator, full_report):
        feasibility = orchestrator.evaluate_goal_feasibility(full_report)
        expected_ratio = full_report.compound_calculation.final_value / 1_000_000_000

        assert feasibility.ratio == pytest.approx(expected_ratio)
        assert feasibility.achievable is False
        assert feasibility.confidence == 20

    def test_custom_profile_reaches_goal(self, orchestrator, user_context):
        from dataclasses import replace

        modest = replace(user_context, target_return=10_000_000)
        report = orchestrator.generate_full_report(modest)
        feasibility = orchestrator.evaluate_goal_feasibility(report)

        assert feasibility.achievable is True
        assert feasibility.confidence == 95

    def test_report_serializes(self, full_report):
        data = full_report.to_dict()

        assert data["portfolio"]["created_at"].startswith("2025-01-15")
        assert data["top_assets"][0]["trust_grade"] in {"A+", "A", "B", "C"}
        assert data["source_validation"]["noise_gate_penalty"] == 0

    def test_renders_all_formats(self, full_report):
        writer = create_report_writer()
        for fmt in ("markdown", "html", "text"):
            assert writer.generate(full_report, format=fmt)


class TestOrchestratorWiring:

    def test_seeded_mock_scoring_is_reproducible(self, fixed_time):
        first = create_orchestrator(time_port=fixed_time, seed=7).generate_full_report()
        second = create_orchestrator(time_port=fixed_time, seed=7).generate_full_report()

        assert first.expert_consensus.consensus_score == second.expert_consensus.consensus_score
        assert [a.score for a in first.expert_consensus.analyses] == [
            a.score for a in second.expert_consensus.analyses
        ]

    def test_dissent_reaches_report(self, fixed_time):
        scoring = FixtureExpertScoringAdapter(
            scores={ExpertType.POLITICAL_ECONOMIST: 4},
            concerns={ExpertType.POLITICAL_ECONOMIST: ["出口管制风险"]},
        )
        report = create_orchestrator(scoring_port=scoring, time_port=fixed_time).generate_full_report()

        assert report.expert_consensus.dissenting_opinion.endswith("出口管制风险")
        assert report.expert_consensus.debate_triggered is True

    def test_scoring_failure_propagates(self, fixed_time):
        scoring = Mock()
        scoring.analyze.side_effect = ScoringUnavailableError("down", source="llm")
        orchestrator = create_orchestrator(scoring_port=scoring, time_port=fixed_time)

        with pytest.raises(ScoringUnavailableError):
            orchestrator.generate_full_report()

    def test_debate_hook_is_wired(self, fixed_time):
        hook = Mock(return_value=None)
        scoring = FixtureExpertScoringAdapter(scores={ExpertType.ECONOMIST: 2})

        create_orchestrator(scoring_port=scoring, time_port=fixed_time, debate_hook=hook).generate_full_report()

        hook.assert_called_once()


class TestReportDateAndInputs:
    """报告日期与输入校验"""

    def test_sources_scored_as_of_report_date(self, orchestrator, user_context):
        from dataclasses import replace

        report = orchestrator.generate_full_report(replace(user_context, current_date="2024-06-01"))

        assert report.metadata.report_date == "2024-06-01"
        assert [s.publish_date for s in report.sources] == ["2024-05-30", "2024-05-25"]
        assert report.sources[0].trust_score == 88

    @pytest.mark.parametrize("field,value", [
        ("monthly_investment", 0),
        ("total_investment_period", 0),
        ("current_date", "2024/06/01"),
    ])
    def test_invalid_profile_rejected(self, orchestrator, user_context, field, value):
        from dataclasses import replace

        with pytest.raises(ValidationError) as exc_info:
            orchestrator.generate_full_report(replace(user_context, **{field: value}))

        assert exc_info.value.details == {"field": field}
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT
