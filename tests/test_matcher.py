"""Tests for query matching."""

from rich_picker.matcher import (
    NEUTRAL_SCORE,
    SCORE_FUZZY,
    SCORE_PREFIX,
    SCORE_SUBSTRING,
    filter_candidates,
    match_text,
)
from rich_picker.sources import Candidate


def cands(*names):
    return [Candidate(n) for n in names]


def displays(results):
    return [r.candidate.display for r in results]


def is_subsequence(query: str, text: str) -> bool:
    it = iter(text.lower())
    return all(ch in it for ch in query.lower())


class TestMatchText:
    def test_empty_query_is_neutral(self):
        assert match_text("anything", "") == (NEUTRAL_SCORE, ())

    def test_prefix(self):
        assert match_text("flyspell-mode", "fly") == (SCORE_PREFIX, (0, 1, 2))

    def test_substring(self):
        assert match_text("show-paren-mode", "paren") == (SCORE_SUBSTRING, (5, 6, 7, 8, 9))

    def test_fuzzy_subsequence(self):
        score, positions = match_text("show-paren-mode", "spm")
        assert score == SCORE_FUZZY
        assert positions == (0, 5, 11)

    def test_case_insensitive(self):
        assert match_text("Flyspell", "FLY")[0] == SCORE_PREFIX

    def test_positions_index_original_text(self):
        text = "\u0130zmir-mode"
        score, positions = match_text(text, "mode")
        assert score == SCORE_SUBSTRING
        assert positions == (6, 7, 8, 9)
        assert "".join(text[p] for p in positions) == "mode"

    def test_expanding_lowercase_prefix(self):
        assert match_text("\u0130zmir", "i") == (SCORE_PREFIX, (0,))

    def test_fuzzy_positions_after_expanding_char(self):
        text = "\u0130stanbul-mode"
        score, positions = match_text(text, "sbm")
        assert score == SCORE_FUZZY
        assert [text[p] for p in positions] == ["s", "b", "m"]

    def test_no_match(self):
        assert match_text("abbrev-mode", "xyz") is None

    def test_out_of_order_does_not_match(self):
        assert match_text("abc", "cba") is None


class TestFilterCandidates:
    def test_empty_query_returns_everything_in_order(self):
        items = cands("b", "a", "c")
        results = filter_candidates(items, "")
        assert displays(results) == ["b", "a", "c"]
        assert [r.index for r in results] == [0, 1, 2]
        assert all(r.score == NEUTRAL_SCORE for r in results)

    def test_tiers_order_results(self):
        items = cands("xfxlxy", "a-fly", "fly-mode")
        assert displays(filter_candidates(items, "fly")) == ["fly-mode", "a-fly", "xfxlxy"]

    def test_stable_within_tier(self):
        items = cands("zeta-fly", "alpha-fly", "mid-fly")
        assert displays(filter_candidates(items, "fly")) == ["zeta-fly", "alpha-fly", "mid-fly"]

    def test_every_result_contains_query_as_subsequence(self):
        items = cands("show-paren-mode", "flyspell-mode", "abbrev-mode", "text-mode")
        for query in ("m", "mode", "fm", "ab", "e-m", "xyz"):
            for result in filter_candidates(items, query):
                assert is_subsequence(query, result.candidate.display)

    def test_nothing_matching_is_dropped_silently(self):
        items = cands("show-paren-mode", "flyspell-mode")
        assert filter_candidates(items, "zzz") == []

    def test_idempotent(self):
        items = cands("abbrev-mode", "flyspell-mode", "show-paren-mode")
        assert filter_candidates(items, "mo") == filter_candidates(items, "mo")

    def test_indexes_point_into_source(self):
        items = cands("abc", "xabc", "abx")
        results = filter_candidates(items, "abc")
        assert [(r.index, r.score) for r in results] == [(0, SCORE_PREFIX), (1, SCORE_SUBSTRING)]

    def test_matches_display_not_value(self):
        items = [Candidate("Flyspell", value="flyspell-mode")]
        assert filter_candidates(items, "mode") == []
