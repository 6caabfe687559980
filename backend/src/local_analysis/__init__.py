"""
Local Analysis Module
git history queries and per-author contribution attribution
"""

from .git_repo import (
    list_tracked_files,
    file_history_numstat,
    file_first_authors,
    sync_branch,
)

from .contribution_analyzer import (
    HistoryParser,
    ParserState,
    AuthorContribution,
    UserEdits,
    UNKNOWN_AUTHOR,
    analyze_file_history,
)

from .file_utils import normalize_path, is_binary_file

__all__ = [
    # Git queries
    'list_tracked_files',
    'file_history_numstat',
    'file_first_authors',
    'sync_branch',

    # Contribution analysis
    'HistoryParser',
    'ParserState',
    'AuthorContribution',
    'UserEdits',
    'UNKNOWN_AUTHOR',
    'analyze_file_history',

    # Path helpers
    'normalize_path',
    'is_binary_file',
]

__version__ = '1.0.0'
