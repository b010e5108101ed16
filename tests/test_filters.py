"""Tests for src/filters.py: source/category toggles and sort order."""

from filters import apply_filters, filter_items, sort_items


def sample(make_item):
    return [
        make_item(id="reddit-1", hours_ago=5, popularity=90, category="tool"),
        make_item(id="hn-1", hours_ago=1, popularity=20, category="model",
                  source="hackernews", source_name="Hacker News"),
        make_item(id="arxiv-2401.1", hours_ago=3, popularity=50, category="research",
                  source="arxiv", source_name="arXiv cs.AI"),
    ]


class TestFilterItems:
    def test_none_means_everything(self, make_item):
        assert len(filter_items(sample(make_item))) == 3

    def test_disabled_source_is_removed(self, make_item):
        result = filter_items(sample(make_item), sources=["reddit", "arxiv"])
        assert {i.source for i in result} == {"reddit", "arxiv"}

    def test_category_toggle(self, make_item):
        result = filter_items(sample(make_item), categories=["research"])
        assert [i.id for i in result] == ["arxiv-2401.1"]

    def test_empty_selection_hides_everything(self, make_item):
        assert filter_items(sample(make_item), sources=[]) == []

    def test_unknown_names_ignored(self, make_item):
        result = filter_items(sample(make_item), sources=["reddit", "twitter"])
        assert [i.id for i in result] == ["reddit-1"]


class TestSortItems:
    def test_sort_by_time(self, make_item):
        result = sort_items(sample(make_item), "time")
        assert [i.id for i in result] == ["hn-1", "arxiv-2401.1", "reddit-1"]

    def test_sort_by_popularity(self, make_item):
        result = sort_items(sample(make_item), "popularity")
        assert [i.id for i in result] == ["reddit-1", "arxiv-2401.1", "hn-1"]

    def test_unknown_sort_falls_back_to_time(self, make_item):
        result = sort_items(sample(make_item), "random")
        assert result[0].id == "hn-1"

    def test_popularity_ties_are_stable(self, make_item):
        items = [make_item(id=f"reddit-{i}", popularity=50, hours_ago=i) for i in range(3)]
        assert [i.id for i in sort_items(items, "popularity")] == ["reddit-0", "reddit-1", "reddit-2"]


def test_apply_filters_filters_then_sorts(make_item):
    result = apply_filters(sample(make_item), sources=["reddit", "arxiv"], sort_by="popularity")
    assert [i.id for i in result] == ["reddit-1", "arxiv-2401.1"]
