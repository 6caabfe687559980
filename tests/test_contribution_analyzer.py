"""
Unit tests for the contribution analyzer.

Covers the author/stat history parser and per-file attribution:
- state transitions of HistoryParser
- percentage computation for text files
- single-owner attribution for binary files, including the oldest-first fallback

Run with: pytest tests/test_contribution_analyzer.py -v
"""

import pytest

from local_analysis.contribution_analyzer import (
    UNKNOWN_AUTHOR,
    HistoryParser,
    ParserState,
    analyze_file_history,
    parse_stat_field,
)


def _never_called():
    raise AssertionError("oldest-first query should not run")


class TestHistoryParser:
    """Test the two-state author/stat parser."""

    def test_starts_awaiting_author(self):
        parser = HistoryParser()
        assert parser.state is ParserState.AWAITING_AUTHOR
        assert parser.current_author is None

    def test_author_line_moves_to_awaiting_stat(self):
        parser = HistoryParser()
        parser.feed("  Alice  ")
        assert parser.state is ParserState.AWAITING_STAT
        assert parser.current_author == "Alice"

    def test_stat_line_credited_to_current_author(self):
        parser = HistoryParser().feed_all(["Alice", "10\t2\treadme.txt"])
        assert parser.user_edits["Alice"].lines_added == 10
        assert parser.user_edits["Alice"].lines_deleted == 2
        assert parser.total_lines_modified == 12

    def test_stat_line_without_author_is_ignored(self):
        parser = HistoryParser().feed_all(["3\t1\treadme.txt", "Alice", "1\t1\treadme.txt"])
        assert parser.orphan_stat_lines == 1
        assert parser.total_lines_modified == 2
        assert list(parser.user_edits) == ["Alice"]

    def test_consecutive_author_lines_keep_the_latest(self):
        parser = HistoryParser().feed_all(["Alice", "Bob", "4\t0\tf.txt"])
        assert "Alice" not in parser.user_edits
        assert parser.user_edits["Bob"].lines_added == 4

    def test_blank_lines_are_skipped(self):
        parser = HistoryParser().feed_all(["Alice", "", "1\t0\tf.txt", "", "Bob", "2\t0\tf.txt", ""])
        assert parser.state is ParserState.AWAITING_STAT
        assert parser.user_edits["Alice"].lines_added == 1
        assert parser.user_edits["Bob"].lines_added == 2
        assert parser.orphan_stat_lines == 0
        assert parser.last_author == "Bob"

    def test_multiple_commits_by_same_author_accumulate(self):
        parser = HistoryParser().feed_all(["Alice", "1\t2\tf", "", "Alice", "3\t4\tf"])
        edits = parser.user_edits["Alice"]
        assert (edits.lines_added, edits.lines_deleted) == (4, 6)


class TestParseStatField:
    @pytest.mark.parametrize("raw,expected", [("10", 10), (" 7 ", 7), ("-", 0), ("abc", 0), ("", 0)])
    def test_values(self, raw, expected):
        assert parse_stat_field(raw) == expected

    def test_malformed_added_field(self):
        parser = HistoryParser().feed_all(["Alice", "abc\t3"])
        assert parser.user_edits["Alice"].lines_added == 0
        assert parser.user_edits["Alice"].lines_deleted == 3


class TestTextFileAttribution:
    """Percentages for files with line-level diff data."""

    def test_two_authors_example(self):
        result = analyze_file_history(
            ["Alice", "10\t2", "Bob", "5\t0"], binary=False, first_authors=_never_called
        )
        assert set(result) == {"Alice", "Bob"}
        assert result["Alice"].lines_added == 10
        assert result["Alice"].lines_deleted == 2
        assert result["Alice"].percentage == pytest.approx(70.588, abs=0.01)
        assert result["Bob"].percentage == pytest.approx(29.412, abs=0.01)

    def test_percentages_sum_to_100(self):
        lines = ["A", "3\t1", "", "B", "7\t9", "", "C", "1\t0", "", "A", "0\t4"]
        result = analyze_file_history(lines, binary=False, first_authors=_never_called)
        assert sum(r.percentage for r in result.values()) == pytest.approx(100.0)

    def test_zero_line_author_is_kept_with_zero_percent(self):
        result = analyze_file_history(
            ["Alice", "5\t5", "Bob", "0\t0"], binary=False, first_authors=_never_called
        )
        assert result["Bob"].percentage == 0.0
        assert result["Alice"].percentage == 100.0

    def test_all_zero_changes_give_zero_percent(self):
        result = analyze_file_history(["Alice", "0\t0"], binary=False, first_authors=_never_called)
        assert result["Alice"].percentage == 0.0

    def test_empty_history_yields_no_entries(self):
        assert analyze_file_history([], binary=False, first_authors=_never_called) == {}
        assert analyze_file_history([""], binary=False, first_authors=_never_called) == {}

    def test_to_dict_uses_camel_case_keys(self):
        result = analyze_file_history(["Alice", "1\t0"], binary=False, first_authors=_never_called)
        assert result["Alice"].to_dict() == {"linesAdded": 1, "linesDeleted": 0, "percentage": 100.0}


class TestBinaryFileAttribution:
    """Binary files have exactly one owner with 100%."""

    def test_last_seen_author_owns_binary(self):
        result = analyze_file_history(
            ["Dave", "-\t-\tlogo.png", "", "Carol", "-\t-\tlogo.png"],
            binary=True,
            first_authors=_never_called,
        )
        assert list(result) == ["Carol"]
        owner = result["Carol"]
        assert (owner.lines_added, owner.lines_deleted, owner.percentage) == (0, 0, 100.0)

    def test_falls_back_to_oldest_first_query(self):
        calls = []

        def first_authors():
            calls.append(True)
            return ["", "  Erin ", "Frank"]

        result = analyze_file_history(["-\t-\tlogo.png"], binary=True, first_authors=first_authors)
        assert calls == [True]
        assert list(result) == ["Erin"]

    def test_empty_history_gives_unknown_owner(self):
        result = analyze_file_history([], binary=True, first_authors=lambda: [])
        assert list(result) == [UNKNOWN_AUTHOR]
        assert result[UNKNOWN_AUTHOR].percentage == 100.0
