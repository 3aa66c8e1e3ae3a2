"""
适配器单元测试
"""

from datetime import date, datetime, timezone
from unittest.mock import Mock

import pytest

from foliosight.adapters import (
    FixedTimeAdapter,
    FixtureExpertScoringAdapter,
    MockExpertScoringAdapter,
    MockSourceAdapter,
    MockUniverseAdapter,
    PromptExpertScoringAdapter,
    SystemTimeAdapter,
    build_expert_prompt,
    parse_expert_response,
)
from foliosight.adapters.expert_scoring_adapter import DEFAULT_CONCERNS
from foliosight.adapters.mock_source_adapter import SourceSeed
from foliosight.adapters.mock_universe_adapter import AI_ML, BLOCKCHAIN
from foliosight.domain.config import DEFAULT_CONFIG
from foliosight.domain.models import ExpertType, MisinfoType, SourceGrade
from foliosight.ports.interfaces import ScoringUnavailableError


ECONOMIST = DEFAULT_CONFIG.experts[ExpertType.ECONOMIST]


SAMPLE_RESPONSE = """核心观点:
- AI 数据中心需求强劲
- 评分体系之外的护城河明显
- 现金流充沛
分数: 8.5
依据: 数据中心收入持续增长，毛利率维持高位。
担忧:
- 估值偏高
- 供应链集中"""


class TestTimeAdapters:

    def test_fixed_time(self):
        adapter = FixedTimeAdapter(datetime(2025, 1, 15, 9, 0))

        assert adapter.get_date() == "2025-01-15"
        assert adapter.get_formatted_datetime("%H:%M") == "09:00"

    def test_fixed_time_from_iso(self):
        adapter = FixedTimeAdapter.from_iso("2025-03-01T12:00:00", tz=timezone.utc)
        assert adapter.get_current_datetime().tzinfo is timezone.utc

    def test_system_time_utc(self):
        assert SystemTimeAdapter(use_utc=True).get_current_datetime().tzinfo is not None


class TestMockUniverseAdapter:

    def test_default_universe(self):
        adapter = MockUniverseAdapter()
        names = [c.name for c in adapter.list_categories()]

        assert AI_ML in names
        assert BLOCKCHAIN in names
        assert {a.ticker for a in adapter.list_assets(AI_ML)} == {"NVDA", "PLTR", "MSFT"}

    def test_unknown_category(self):
        assert MockUniverseAdapter().list_assets("不存在") == []

    def test_returns_copies(self):
        adapter = MockUniverseAdapter()
        adapter.list_categories().clear()
        assert len(adapter.list_categories()) == 4


class TestMockSourceAdapter:

    def test_default_sources_relative_to_as_of(self):
        sources = MockSourceAdapter().list_sources(date(2025, 1, 15))

        assert [s.publisher for s in sources] == ["Bloomberg", "Reuters"]
        assert sources[0].publish_date == "2025-01-13"
        assert sources[0].trust_score == 88
        assert sources[0].grade == SourceGrade.A
        assert all(s.misinfo_type == MisinfoType.VERIFIED for s in sources)

    def test_custom_seeds(self):
        seeds = [SourceSeed(url="u", title="t", publisher="RandomBlog", days_ago=400)]
        sources = MockSourceAdapter(seeds=seeds).list_sources(date(2025, 1, 15))

        assert len(sources) == 1
        assert sources[0].misinfo_type != MisinfoType.VERIFIED


class TestMockExpertScoringAdapter:

    def test_seed_is_reproducible(self, make_asset):
        asset = make_asset()
        first = MockExpertScoringAdapter(seed=42)
        second = MockExpertScoringAdapter(seed=42)

        scores_a = [first.analyze(t, p, asset, "").score for t, p in DEFAULT_CONFIG.experts.items()]
        scores_b = [second.analyze(t, p, asset, "").score for t, p in DEFAULT_CONFIG.experts.items()]

        assert scores_a == scores_b
        assert all(6.5 <= s <= 8.5 for s in scores_a)

    def test_no_jitter(self, make_asset):
        analysis = MockExpertScoringAdapter(jitter=0).analyze(
            ExpertType.ECONOMIST, ECONOMIST, make_asset(), ""
        )

        assert analysis.score == 7.5
        assert analysis.concerns is None
        assert len(analysis.key_points) == 3
        assert analysis.perspective == ECONOMIST.role

    def test_low_score_has_concerns(self, make_asset):
        analysis = MockExpertScoringAdapter(base_score=3, jitter=0).analyze(
            ExpertType.ECONOMIST, ECONOMIST, make_asset(), ""
        )
        assert analysis.concerns == DEFAULT_CONCERNS

    def test_scores_clamped(self, make_asset):
        analysis = MockExpertScoringAdapter(base_score=15, jitter=0).analyze(
            ExpertType.ECONOMIST, ECONOMIST, make_asset(), ""
        )
        assert analysis.score == 10


class TestFixtureExpertScoringAdapter:

    def test_scores_and_calls(self, make_asset):
        adapter = FixtureExpertScoringAdapter(
            scores={ExpertType.FUTURIST: 4},
            concerns={ExpertType.ECONOMIST: ["利率"]},
        )
        asset = make_asset(name="Alpha")

        futurist = adapter.analyze(
            ExpertType.FUTURIST, DEFAULT_CONFIG.experts[ExpertType.FUTURIST], asset, ""
        )
        economist = adapter.analyze(ExpertType.ECONOMIST, ECONOMIST, asset, "")

        assert futurist.score == 4
        assert futurist.concerns == DEFAULT_CONCERNS
        assert economist.score == 8.0
        assert economist.concerns == ["利率"]
        assert adapter.calls == [(ExpertType.FUTURIST, "Alpha"), (ExpertType.ECONOMIST, "Alpha")]


class TestPromptParsing:

    def test_parse_full_response(self):
        analysis = parse_expert_response(ExpertType.ECONOMIST, ECONOMIST, SAMPLE_RESPONSE)

        assert analysis.score == 8.5
        assert analysis.key_points == [
            "AI 数据中心需求强劲",
            "评分体系之外的护城河明显",
            "现金流充沛",
        ]
        assert analysis.concerns == ["估值偏高", "供应链集中"]
        assert analysis.perspective == ECONOMIST.role

    def test_missing_score_defaults(self):
        analysis = parse_expert_response(ExpertType.ECONOMIST, ECONOMIST, "没有结构的回答")

        assert analysis.score == 7
        assert analysis.key_points == []
        assert analysis.concerns is None

    def test_score_clamped(self):
        assert parse_expert_response(ExpertType.ECONOMIST, ECONOMIST, "Score: 15").score == 10

    def test_key_points_capped(self):
        response = "Key Points:\n" + "\n".join(f"- point {i}" for i in range(8))
        analysis = parse_expert_response(ExpertType.ECONOMIST, ECONOMIST, response)
        assert len(analysis.key_points) == 5

    def test_reasoning_truncated(self):
        analysis = parse_expert_response(ExpertType.ECONOMIST, ECONOMIST, "x" * 800)
        assert len(analysis.reasoning) == 500

    def test_build_prompt(self, make_asset):
        prompt = build_expert_prompt(ECONOMIST, make_asset("NVDA", name="NVIDIA"), "背景信息")

        assert ECONOMIST.role in prompt
        assert "NVIDIA (NVDA)" in prompt
        assert "背景信息" in prompt


class TestPromptExpertScoringAdapter:

    def test_retries_then_succeeds(self, make_asset):
        llm = Mock()
        llm.complete.side_effect = [RuntimeError("timeout"), SAMPLE_RESPONSE]
        adapter = PromptExpertScoringAdapter(llm, max_attempts=2, retry_delay=0)

        analysis = adapter.analyze(ExpertType.ECONOMIST, ECONOMIST, make_asset(), "")

        assert analysis.score == 8.5
        assert llm.complete.call_count == 2

    def test_raises_after_attempts(self, make_asset):
        llm = Mock()
        llm.complete.side_effect = RuntimeError("down")
        adapter = PromptExpertScoringAdapter(llm, max_attempts=3, retry_delay=0)

        with pytest.raises(ScoringUnavailableError):
            adapter.analyze(ExpertType.ECONOMIST, ECONOMIST, make_asset(), "")
        assert llm.complete.call_count == 3
