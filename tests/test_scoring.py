"""Tests for the Score value object."""

from types import SimpleNamespace

import pytest

from reddat.services.scoring import Score, formatted_score_for


def link(upvotes=0, downvotes=0):
    return SimpleNamespace(upvotes=upvotes, downvotes=downvotes)


class TestScore:
    def test_counters_are_copied_from_link(self):
        score = Score.of(link(upvotes=10, downvotes=5))

        assert score.upvotes == 10
        assert score.downvotes == 5

    def test_value_is_difference_between_up_and_down_votes(self):
        assert Score.of(link(10, 3)).value == 7

    def test_value_may_be_negative(self):
        assert Score.of(link(1, 4)).value == -3

    def test_counters_are_captured_by_value(self):
        source = link(2, 1)
        score = Score.of(source)

        source.upvotes = 50

        assert score.upvotes == 2
        assert score.value == 1

    def test_formatted_shows_net_score_and_raw_votes(self):
        assert Score.of(link(7, 2)).formatted() == "5 (+7, -2)"

    def test_formatted_score_for_accepts_link_or_score(self):
        assert formatted_score_for(link(7, 2)) == "5 (+7, -2)"
        assert formatted_score_for(Score(0, 3)) == "-3 (+0, -3)"


class TestControversial:
    def test_votes_within_twenty_percent_are_controversial(self):
        assert Score.of(link(10, 9)).controversial is True

    def test_votes_further_apart_are_not_controversial(self):
        assert Score.of(link(10, 5)).controversial is False

    def test_exactly_twenty_percent_is_not_controversial(self):
        assert Score.of(link(10, 8)).controversial is False

    def test_downvote_heavy_links_use_the_larger_count(self):
        assert Score.of(link(9, 10)).controversial is True

    def test_no_votes_is_not_controversial(self):
        assert Score.of(link(0, 0)).controversial is False


class TestEquality:
    def test_scores_from_different_links_with_same_votes_are_equal(self):
        a = Score.of(link(3, 1))
        b = Score.of(link(3, 1))

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    @pytest.mark.parametrize("other", [(3, 2), (4, 1), (1, 3)])
    def test_different_votes_are_not_equal(self, other):
        assert Score(3, 1) != Score(*other)

    def test_scores_are_usable_as_mapping_keys(self):
        counts = {Score(1, 0): "one"}

        assert counts[Score.of(link(1, 0))] == "one"

    def test_scores_are_immutable(self):
        score = Score(1, 1)

        with pytest.raises(AttributeError):
            score.upvotes = 2
