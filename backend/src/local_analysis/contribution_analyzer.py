"""
Contribution Analyzer Module

Attributes per-file line changes to authors from ``git log --numstat`` output.

The history of one file is rendered by git as an author line followed by the
numstat line(s) of that commit::

    Alice
    10\t2\treadme.txt

    Bob
    5\t0\treadme.txt

HistoryParser walks those lines with two explicit states. An author line
moves to AWAITING_STAT; a stat line is only accepted in AWAITING_STAT and is
credited to the current author.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional
import logging

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown"


class ParserState(Enum):
    AWAITING_AUTHOR = "awaiting_author"
    AWAITING_STAT = "awaiting_stat"


@dataclass
class UserEdits:
    """Lines one author added and deleted in a single file."""
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def total(self) -> int:
        return self.lines_added + self.lines_deleted


@dataclass
class AuthorContribution:
    lines_added: int
    lines_deleted: int
    percentage: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "linesAdded": self.lines_added,
            "linesDeleted": self.lines_deleted,
            "percentage": self.percentage,
        }


def parse_stat_field(value: str) -> int:
    """Parse one numstat column; anything non-numeric (``-`` for binaries) is 0."""
    try:
        return max(int(value.strip()), 0)
    except ValueError:
        return 0


class HistoryParser:
    """Single-pass parser for one file's author/numstat history."""

    def __init__(self) -> None:
        self.state = ParserState.AWAITING_AUTHOR
        self.current_author: Optional[str] = None
        self.last_author: Optional[str] = None
        self.user_edits: Dict[str, UserEdits] = {}
        self.total_lines_modified = 0
        self.orphan_stat_lines = 0

    def feed(self, line: str) -> None:
        if "\t" not in line:
            self._on_author(line.strip())
        else:
            self._on_stat(line)

    def feed_all(self, lines: Iterable[str]) -> "HistoryParser":
        for line in lines:
            self.feed(line)
        return self

    def _on_author(self, author: str) -> None:
        # blank separator lines between commits carry no attribution
        if not author:
            return
        self.current_author = author
        self.last_author = author
        self.state = ParserState.AWAITING_STAT

    def _on_stat(self, line: str) -> None:
        if self.state is not ParserState.AWAITING_STAT or self.current_author is None:
            self.orphan_stat_lines += 1
            return

        fields = line.split("\t")
        added = parse_stat_field(fields[0])
        deleted = parse_stat_field(fields[1]) if len(fields) > 1 else 0

        edits = self.user_edits.setdefault(self.current_author, UserEdits())
        edits.lines_added += added
        edits.lines_deleted += deleted
        self.total_lines_modified += added + deleted


def text_file_contributions(parser: HistoryParser) -> Dict[str, AuthorContribution]:
    """Per-author entries for a text file; every accumulated author is kept."""
    total = parser.total_lines_modified
    result: Dict[str, AuthorContribution] = {}
    for author, edits in parser.user_edits.items():
        result[author] = AuthorContribution(
            lines_added=edits.lines_added,
            lines_deleted=edits.lines_deleted,
            percentage=(edits.total / total) * 100 if total > 0 else 0.0,
        )
    return result


def resolve_binary_owner(
    parser: HistoryParser,
    first_authors: Callable[[], List[str]],
) -> str:
    """Owner of a binary file.

    The most recent author seen in the history wins. When the history held no
    author at all, ``first_authors`` is asked for the oldest-first author list
    and its first entry is used.
    """
    if parser.last_author:
        return parser.last_author

    for name in first_authors():
        name = name.strip()
        if name:
            return name
    return UNKNOWN_AUTHOR


def binary_file_contributions(owner: str) -> Dict[str, AuthorContribution]:
    return {owner: AuthorContribution(lines_added=0, lines_deleted=0, percentage=100.0)}


def analyze_file_history(
    lines: Iterable[str],
    *,
    binary: bool,
    first_authors: Callable[[], List[str]],
) -> Dict[str, AuthorContribution]:
    """Attribute one file's history to its authors.

    Args:
        lines: Output of ``git log --pretty=format:%an --numstat --follow``
        binary: Whether the file is binary; binaries get a single owner
        first_authors: Lazily returns the file's authors oldest first; only
            called for binaries whose history has no author line

    Returns:
        Mapping of author name to AuthorContribution (may be empty for text files)
    """
    parser = HistoryParser().feed_all(lines)
    if parser.orphan_stat_lines:
        logger.debug(f"Ignored {parser.orphan_stat_lines} stat line(s) without an author")

    if binary:
        return binary_file_contributions(resolve_binary_owner(parser, first_authors))
    return text_file_contributions(parser)
