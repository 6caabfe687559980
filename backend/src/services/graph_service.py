"""Commit graph of a working copy."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from config.config_manager import get_config
from local_analysis import git_repo

logger = logging.getLogger(__name__)


def build_commit_graph(repo_path: str, limit: Optional[int] = None) -> Dict[str, Any]:
    """Return ``{"commits": [...], "branches": [...]}``, newest commit first.

    Each commit carries its parent hashes so clients can draw the graph.
    """
    limit = limit or get_config().graph_commit_limit
    commits = git_repo.commit_log(repo_path, limit)
    branches = git_repo.list_branches(repo_path)
    logger.info(f"Built commit graph for {repo_path}: {len(commits)} commit(s), {len(branches)} branch(es)")
    return {"commits": commits, "branches": branches}
