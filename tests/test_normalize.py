"""Tests for src/normalize.py: item model, helpers, categorization and dedup."""

from datetime import datetime, timezone

import pytest

from normalize import (
    absolute_url,
    bounded_popularity,
    build_rules,
    categorize,
    deduplicate_by_id,
    epoch_to_datetime,
    matches_keywords,
    truncate_summary,
)


class TestNewsItem:
    def test_to_dict_uses_dashboard_field_names(self, make_item):
        data = make_item(source_name="r/LocalLLaMA").to_dict()
        assert data["sourceName"] == "r/LocalLLaMA"
        assert "publishedAt" in data
        assert set(data) >= {"id", "title", "url", "source", "category", "popularity", "metadata"}

    def test_summary_omitted_when_empty(self, make_item):
        assert "summary" not in make_item(summary=None).to_dict()

    def test_rejects_unknown_source(self, make_item):
        with pytest.raises(ValueError):
            make_item(source="twitter")

    def test_rejects_relative_url(self, make_item):
        with pytest.raises(ValueError):
            make_item(url="/r/MachineLearning/comments/abc")

    def test_rejects_empty_title(self, make_item):
        with pytest.raises(ValueError):
            make_item(title="")

    def test_is_immutable(self, make_item):
        item = make_item()
        with pytest.raises(AttributeError):
            item.popularity = 99


class TestHelpers:
    def test_truncate_summary_caps_at_300(self):
        assert len(truncate_summary("x" * 1000)) == 300

    def test_truncate_summary_collapses_whitespace(self):
        assert truncate_summary("  line one\n\n line   two ") == "line one line two"

    def test_truncate_summary_empty_is_none(self):
        assert truncate_summary("") is None
        assert truncate_summary(None) is None
        assert truncate_summary("   \n") is None

    def test_epoch_to_datetime_is_utc(self):
        dt = epoch_to_datetime(1700000000)
        assert dt == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_popularity_formula(self):
        assert bounded_popularity(100, 50) == 20.0

    def test_popularity_clamped_to_100(self):
        assert bounded_popularity(100000, 100000) == 100

    def test_popularity_never_negative(self):
        assert bounded_popularity(-500, 0) == 0
        assert bounded_popularity(None, None) == 0

    def test_absolute_url_keeps_absolute(self):
        assert absolute_url("https://example.com/x", "https://reddit.com") == "https://example.com/x"

    def test_absolute_url_joins_permalink(self):
        assert (absolute_url("/r/ml/comments/abc/", "https://www.reddit.com")
                == "https://www.reddit.com/r/ml/comments/abc/")

    def test_matches_keywords_case_insensitive(self):
        assert matches_keywords("New LLM architecture", ["llm"])
        assert not matches_keywords("New database indexing", ["llm", "gpt"])


class TestCategorize:
    def test_tutorial_beats_model(self):
        rules = build_rules(None)
        assert categorize(rules, "Guide to the new model release") == "tutorial"

    def test_model_beats_tool(self):
        rules = build_rules(None)
        assert categorize(rules, "Announcing a framework") == "model"

    def test_research_keyword(self):
        assert categorize(build_rules(None), "A paper on sparse attention") == "research"

    def test_defaults_to_application(self):
        assert categorize(build_rules(None), "Chatbot for my bakery") == "application"

    def test_tag_keywords_match_flair(self):
        rules = build_rules([
            {"category": "research", "keywords": ["paper"], "tag_keywords": ["research"]},
        ])
        assert categorize(rules, "Interesting results", "Research") == "research"
        assert categorize(rules, "Interesting results", None) == "application"

    def test_rules_follow_configured_order(self):
        rules = build_rules([
            {"category": "tool", "keywords": ["release"]},
            {"category": "model", "keywords": ["release"]},
        ])
        assert categorize(rules, "v2 release") == "tool"

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            build_rules([{"category": "memes", "keywords": ["lol"]}])


class TestDeduplicateById:
    def test_keeps_higher_popularity(self, make_item):
        low = make_item(id="hn-1", popularity=10, title="Low")
        high = make_item(id="hn-1", popularity=60, title="High")
        result = deduplicate_by_id([low, high])
        assert len(result) == 1
        assert result[0].title == "High"
        assert result[0].popularity == 60

    def test_tie_keeps_first_seen(self, make_item):
        first = make_item(id="arxiv-2401.1", popularity=50, title="First")
        second = make_item(id="arxiv-2401.1", popularity=50, title="Second")
        assert deduplicate_by_id([first, second])[0].title == "First"

    def test_distinct_ids_all_kept(self, make_item):
        items = [make_item(id=f"reddit-{i}") for i in range(5)]
        assert len(deduplicate_by_id(items)) == 5

    def test_empty_list_returns_empty(self):
        assert deduplicate_by_id([]) == []
