"""Tests for sift.query.analyzer — intent detection and search options."""

from __future__ import annotations

import pytest

from sift.config import QueryConfig
from sift.content.models import ContentKind, UrgencyLevel
from sift.query.analyzer import (
    analyze_query,
    build_search_options,
    detect_intents,
    extract_content_types,
    extract_time_context,
    primary_intent,
)
from sift.query.models import Intent, IntentFlags, SearchOptions, TimeContext
from sift.vectors.models import SearchFilters


class TestPrimaryIntent:
    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ("what's urgent?", Intent.URGENCY),
            ("what's urgent this week", Intent.URGENCY),
            ("what did I work on today", Intent.TEMPORAL),
            ("show me trending topics", Intent.TREND),
            ("what have I been thinking about", Intent.TREND),
            ("give me a breakdown of my notes", Intent.ANALYTICAL),
            ("find that pdf", Intent.CONTENT_TYPE),
            ("kubernetes deployment strategies", Intent.SEMANTIC),
        ],
    )
    def test_classification(self, query: str, expected: Intent):
        assert analyze_query(query).primary_intent == expected

    def test_urgency_beats_everything(self):
        flags = IntentFlags(
            temporal=True, analytical=True, urgency=True, content_type=True, trend=True
        )
        assert primary_intent(flags) == Intent.URGENCY

    def test_temporal_beats_trend(self):
        assert primary_intent(IntentFlags(temporal=True, trend=True)) == Intent.TEMPORAL

    def test_no_flags_is_semantic(self):
        assert primary_intent(IntentFlags()) == Intent.SEMANTIC


class TestDetectors:
    def test_word_boundaries(self):
        flags = detect_intents("i know the residue is on the snow")
        assert not flags.temporal
        assert not flags.urgency

    def test_phrases(self):
        assert detect_intents("what am i focused on").trend
        assert detect_intents("anything due tomorrow").urgency

    @pytest.mark.parametrize(
        "query",
        ["any deadlines this week?", "show my reminders", "what alerts came in"],
    )
    def test_inflected_urgency_keywords(self, query: str):
        analysis = analyze_query(query)
        assert analysis.intents.urgency
        assert analysis.primary_intent == Intent.URGENCY
        assert build_search_options(analysis).filters.urgency_level == UrgencyLevel.HIGH

    def test_inflected_analytical_keyword(self):
        assert analyze_query("what have I analyzed").primary_intent == Intent.ANALYTICAL

    def test_trending_is_not_temporal(self):
        flags = detect_intents("show me trending topics")
        assert flags.trend
        assert not flags.temporal

    def test_flags_are_independent(self):
        flags = detect_intents("urgent pdf from today")
        assert flags.urgency
        assert flags.content_type
        assert flags.temporal


class TestTimeContext:
    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ("what happened today", TimeContext.TODAY),
            ("notes from yesterday", TimeContext.YESTERDAY),
            ("this week", TimeContext.THIS_WEEK),
            ("over the past week", TimeContext.THIS_WEEK),
            ("last week", TimeContext.LAST_WEEK),
            ("past month", TimeContext.THIS_MONTH),
            ("what have I saved lately", TimeContext.RECENTLY),
            ("kubernetes", None),
        ],
    )
    def test_extraction(self, query: str, expected: TimeContext | None):
        assert extract_time_context(query) == expected

    def test_first_match_wins(self):
        assert extract_time_context("today and yesterday") == TimeContext.TODAY


class TestContentTypes:
    def test_single_family(self):
        assert extract_content_types("my saved articles") == [ContentKind.URL]

    def test_multiple_families(self):
        assert extract_content_types("links and files") == [ContentKind.FILE, ContentKind.URL]

    def test_none(self):
        assert extract_content_types("kubernetes") == []


class TestAnalysisFlags:
    def test_question(self):
        assert analyze_query("what's urgent?").is_question
        assert analyze_query("How many notes").is_question
        assert not analyze_query("kubernetes notes").is_question

    def test_aggregation(self):
        assert analyze_query("how many links did I save").needs_aggregation
        assert not analyze_query("kubernetes").needs_aggregation

    def test_summary(self):
        assert analyze_query("summarize my week").needs_summary

    def test_keeps_original_query(self):
        assert analyze_query("What's URGENT?").original_query == "What's URGENT?"


class TestBuildSearchOptions:
    def test_defaults(self):
        options = build_search_options(analyze_query("kubernetes"))
        assert options.limit == 10
        assert options.filters == SearchFilters()

    def test_urgency_filter(self):
        options = build_search_options(analyze_query("what's urgent?"))
        assert options.filters.urgency_level == UrgencyLevel.HIGH

    def test_trend_threshold(self):
        options = build_search_options(analyze_query("what am I working on"))
        assert options.filters.importance_threshold == 2.0

    def test_aggregation_raises_limit(self):
        options = build_search_options(analyze_query("show me trending topics"))
        assert options.limit == 20

    def test_single_content_type_filter(self):
        options = build_search_options(analyze_query("find that pdf"))
        assert options.filters.content_type == ContentKind.FILE

    def test_multiple_content_types_no_filter(self):
        options = build_search_options(analyze_query("links and files"))
        assert options.filters.content_type is None

    @pytest.mark.parametrize(
        ("query", "hours"),
        [
            ("today", 24.0),
            ("yesterday", 48.0),
            ("this week", 168.0),
            ("recently", 168.0),
            ("last week", 336.0),
            ("this month", 720.0),
        ],
    )
    def test_time_windows(self, query: str, hours: float):
        assert build_search_options(analyze_query(query)).filters.max_age_hours == hours

    def test_base_options_kept(self):
        base = SearchOptions(limit=3, filters=SearchFilters(content_type=ContentKind.URL))
        options = build_search_options(analyze_query("kubernetes"), base)
        assert options.limit == 3
        assert options.filters.content_type == ContentKind.URL

    def test_base_not_mutated(self):
        base = SearchOptions()
        build_search_options(analyze_query("what's urgent?"), base)
        assert base.filters.urgency_level is None

    def test_config_limits(self):
        config = QueryConfig(default_limit=5, aggregation_limit=50)
        assert build_search_options(analyze_query("kubernetes"), config=config).limit == 5
        assert build_search_options(analyze_query("list everything"), config=config).limit == 50
