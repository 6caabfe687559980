"""
Per-file, per-author contribution statistics for a remote repository.

compute_contributions() clones the repository, synchronizes the requested
branch and walks every tracked file's history. Any failure aborts the whole
computation; the working copy is removed on every exit path.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

from config.config_manager import get_config
from local_analysis import git_repo
from local_analysis.contribution_analyzer import AuthorContribution, analyze_file_history
from local_analysis.file_utils import is_binary_file
from services.errors import ContributionsError
from services.repo_provisioning import provisioned_repo

logger = logging.getLogger(__name__)

ContributionStats = Dict[str, Dict[str, AuthorContribution]]


def collect_contributions(repo_path: str) -> ContributionStats:
    """Attribute every tracked file of an already checked-out working copy."""
    contributions: ContributionStats = {}

    for file_path in git_repo.list_tracked_files(repo_path):
        history = git_repo.file_history_numstat(repo_path, file_path)
        entries = analyze_file_history(
            history,
            binary=is_binary_file(file_path, repo_path),
            first_authors=lambda p=file_path: git_repo.file_first_authors(repo_path, p),
        )
        if entries:
            contributions[file_path] = entries
        logger.debug(f"{file_path}: {len(entries)} author(s)")

    return contributions


def compute_contributions(repo_url: str, branch: Optional[str] = None) -> ContributionStats:
    """Compute contribution statistics for ``branch`` of ``repo_url``.

    Args:
        repo_url: Clone URL of the repository
        branch: Branch to analyze (defaults to the configured default branch)

    Returns:
        Mapping of file path -> author -> AuthorContribution

    Raises:
        ContributionsError: On any provisioning, sync or history failure. The
            original exception is chained as ``__cause__``.
    """
    branch = branch or get_config().default_branch
    logger.info(f"Computing contributions for {repo_url} ({branch})")

    try:
        with provisioned_repo(repo_url) as repo_path:
            git_repo.sync_branch(repo_path, branch)
            contributions = collect_contributions(repo_path)
    except Exception as exc:
        logger.exception(f"Failed to compute contributions for {repo_url} ({branch}): {exc}")
        raise ContributionsError() from exc

    logger.info(f"Computed contributions for {len(contributions)} file(s) in {repo_url}")
    return contributions


def contributions_to_dict(contributions: ContributionStats) -> Dict[str, Dict[str, Dict[str, float]]]:
    """JSON-ready form with camelCase record keys."""
    return {
        path: {author: record.to_dict() for author, record in authors.items()}
        for path, authors in contributions.items()
    }
