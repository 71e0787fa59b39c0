"""Tests for Jaccard scoring and store search."""

import logging

import pytest

from goto.matcher import Match, score, search
from goto.tag import Tag

from tests.conftest import make_bookmark


def tags(raw: str) -> frozenset:
    return Tag.new_set(raw)


class TestScore:
    def test_identical(self):
        assert score(tags("a b"), tags("a b")) == 1.0

    def test_disjoint(self):
        assert score(tags("a b"), tags("c")) == 0.0

    def test_partial(self):
        assert score(tags("tech news"), tags("tech")) == 0.5
        assert score(tags("a b c"), tags("b c d")) == 0.5

    def test_empty_query(self):
        assert score(tags("a b"), frozenset()) == 0.0

    def test_empty_terms(self):
        assert score(frozenset(), tags("a")) == 0.0

    def test_both_empty(self):
        assert score(frozenset(), frozenset()) == 0.0

    @pytest.mark.parametrize("terms,query", [
        ("a", "a b c d e"),
        ("a b c", "a"),
        ("x y", "y z"),
        ("", "q"),
        ("q", ""),
    ])
    def test_bounds(self, terms, query):
        assert 0.0 <= score(tags(terms), tags(query)) <= 1.0


class TestSearch:
    def test_scenario_empty_store(self, store):
        assert search(store, tags("anything")) == []

    def test_scenario_ranks_by_overlap(self, store):
        # Hosts without a root-domain label keep terms equal to tags
        first = make_bookmark("http://localhost/tech", "tech news")
        second = make_bookmark("http://localhost/science", "science")
        store.save(first)
        store.save(second)

        results = search(store, tags("tech"))
        assert results == [Match(0.5, first)]

    def test_domain_label_counts_as_term(self, store):
        bkm = make_bookmark("https://github.com/", "code")
        store.save(bkm)
        results = search(store, tags("github"))
        assert results == [Match(0.5, bkm)]

    def test_descending_order(self, store):
        exact = make_bookmark("http://localhost/1", "a b")
        partial = make_bookmark("http://localhost/2", "a b c d")
        store.save(partial)
        store.save(exact)
        results = search(store, tags("a b"), min_score=0.0)
        assert [m.bookmark for m in results] == [exact, partial]
        assert [m.score for m in results] == [1.0, 0.5]

    def test_min_score_filters(self, store):
        store.save(make_bookmark("http://localhost/1", "a b c d"))
        assert search(store, tags("a"), min_score=0.3) == []
        assert len(search(store, tags("a"), min_score=0.25)) == 1

    def test_zero_score_filtered_by_default(self, store):
        store.save(make_bookmark("http://localhost/1", "unrelated"))
        assert search(store, tags("tech")) == []

    def test_empty_query_lists_all(self, store):
        store.save(make_bookmark("http://localhost/1", "a"))
        store.save(make_bookmark("http://localhost/2"))
        results = search(store, [], min_score=0.9)
        assert len(results) == 2
        assert all(m.score == 0.0 for m in results)

    def test_ties_follow_traversal_order(self, store):
        bookmarks = [make_bookmark(f"http://localhost/{i}", "same") for i in range(5)]
        for b in bookmarks:
            store.save(b)
        paths = list(store.iter_paths())
        expected = [store.load(p) for p in paths]
        assert [m.bookmark for m in search(store, tags("same"))] == expected
        assert [m.bookmark for m in search(store, tags("same"))] == expected

    def test_corrupt_record_skipped_and_logged(self, store, caplog):
        good = make_bookmark("http://localhost/ok", "tech")
        store.save(good)
        (store.root / "broken.yaml").write_text("url: [oops\n")
        (store.root / "README.txt").write_text("not a record")

        with caplog.at_level(logging.ERROR, logger="goto.matcher"):
            results = search(store, tags("tech"))

        assert results == [Match(1.0, good)]
        assert "broken.yaml" in caplog.text

    def test_hidden_entries_not_scanned(self, store):
        hidden = store.root / ".archive"
        hidden.mkdir()
        (hidden / "x.yaml").write_text("url: https://example.com/\ntags: [tech]\n")
        assert search(store, tags("tech")) == []

    def test_accepts_any_iterable(self, store):
        store.save(make_bookmark("http://localhost/1", "a"))
        assert len(search(store, [Tag.new("a")])) == 1
