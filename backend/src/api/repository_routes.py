# Repository API Routes
# Contribution statistics, folder tree, current branch and commit graph
# for a remote repository, computed from a fresh clone per request.

from fastapi import APIRouter, Depends, HTTPException, Query, status
from datetime import datetime, time, timezone
from typing import Optional
from urllib.parse import unquote
import logging

from api.dependencies import get_repository_store
from api.models.repository_models import (
    CommitGraphResponse,
    ContributionsResponse,
    CurrentBranchResponse,
    TreeResponse,
)
from config.config_manager import get_config
from local_analysis import git_repo
from services.contributions_service import compute_contributions, contributions_to_dict
from services.errors import ContributionsError
from services.graph_service import build_commit_graph
from services.repo_provisioning import provisioned_repo
from services.repository_store import RepositoryRecord, RepositoryStore
from services.tree_service import build_repository_tree

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/repositories", tags=["Repositories"])


def _raise_api_error(code: str, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
    raise HTTPException(status_code=status_code, detail={"code": code, "message": message})


def _require_repo_url(repo_url: Optional[str]) -> str:
    if not repo_url or not repo_url.strip():
        _raise_api_error("REPO_URL_REQUIRED", "The repoUrl query parameter is required", status.HTTP_400_BAD_REQUEST)
    # Clients encode the URL before putting it in the query string.
    return unquote(repo_url.strip())


def _require_registered(store: RepositoryStore, repo_url: str) -> RepositoryRecord:
    repo = store.find_by_url(repo_url)
    if repo is None:
        _raise_api_error("REPO_NOT_FOUND", f"Repository {repo_url} is not registered", status.HTTP_404_NOT_FOUND)
    return repo


def parse_date_param(value: Optional[str], is_until: bool = False) -> Optional[datetime]:
    """Parse a ``YYYY-MM-DD`` query value as the start (or end) of that UTC day.

    Unparseable values are ignored rather than rejected.
    """
    if not value or not value.strip():
        return None
    try:
        day = datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        logger.warning(f"Ignoring invalid date parameter: {value!r}")
        return None
    moment = time(23, 59, 59, 999000) if is_until else time(0, 0, 0)
    return datetime.combine(day, moment, tzinfo=timezone.utc)


@router.get("/contributions", response_model=ContributionsResponse)
def get_contributions(
    repo_url: Optional[str] = Query(None, alias="repoUrl"),
    branch: Optional[str] = Query(None),
    store: RepositoryStore = Depends(get_repository_store),
):
    """
    Per-file, per-author line contribution statistics for a branch.

    Returns:
        ContributionsResponse: file path -> author -> {linesAdded, linesDeleted, percentage}
    """
    decoded_url = _require_repo_url(repo_url)
    branch_to_use = (branch or "").strip() or get_config().default_branch

    try:
        _require_registered(store, decoded_url)
        contributions = compute_contributions(decoded_url, branch_to_use)
    except HTTPException:
        raise
    except ContributionsError as e:
        logger.error(f"Contributions failed for {decoded_url}: {e.__cause__ or e}")
        _raise_api_error("FAILED_TO_COMPUTE_CONTRIBUTIONS", str(e))
    except Exception as e:
        logger.error(f"Unexpected error computing contributions for {decoded_url}: {e}")
        _raise_api_error("FAILED_TO_COMPUTE_CONTRIBUTIONS", "could not compute contributions")

    return ContributionsResponse(
        repoUrl=decoded_url,
        branch=branch_to_use,
        contributions=contributions_to_dict(contributions),
    )


@router.get("/tree", response_model=TreeResponse)
def get_repository_tree(
    repo_url: Optional[str] = Query(None, alias="repoUrl"),
    author: Optional[str] = Query(None),
    since: Optional[str] = Query(None),
    until: Optional[str] = Query(None),
    branch: Optional[str] = Query(None),
    store: RepositoryStore = Depends(get_repository_store),
):
    """
    Folder tree of the repository with per-file change statistics.

    ``author``, ``since`` and ``until`` restrict the tree to files touched by
    matching commits. When an author filter matches nothing, a warning is
    returned with an empty tree.
    """
    decoded_url = _require_repo_url(repo_url)
    branch_to_use = (branch or "").strip() or None
    sanitized_author = author.strip() if author and author.strip() else None
    since_date = parse_date_param(since)
    until_date = parse_date_param(until, is_until=True)

    logger.debug(f"Tree request: author={sanitized_author} since={since_date} until={until_date}")

    try:
        _require_registered(store, decoded_url)
        with provisioned_repo(decoded_url) as repo_path:
            if branch_to_use:
                if not git_repo.branch_exists(repo_path, branch_to_use):
                    _raise_api_error(
                        "BRANCH_NOT_EXISTS_IN_REPO",
                        f"Branch '{branch_to_use}' does not exist in the repository.",
                        status.HTTP_400_BAD_REQUEST,
                    )
                git_repo.sync_branch(repo_path, branch_to_use)

            tree = build_repository_tree(
                repo_path,
                author=sanitized_author,
                since=since_date,
                until=until_date,
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[get_repository_tree] Error for {decoded_url}: {e}")
        _raise_api_error("FAILED_TO_GET_REPO_TREE", "Failed to build the repository tree")

    if sanitized_author and tree.is_empty():
        return TreeResponse(
            warning=f"No commits by author '{sanitized_author}'.",
            tree=[],
        )
    return TreeResponse(tree=tree.to_dict())


@router.get("/current-branch", response_model=CurrentBranchResponse)
def get_current_branch(repo_url: Optional[str] = Query(None, alias="repoUrl")):
    """Branch checked out by a fresh clone (the remote's default branch)."""
    decoded_url = _require_repo_url(repo_url)
    try:
        with provisioned_repo(decoded_url) as repo_path:
            branch = git_repo.current_branch(repo_path)
    except Exception as e:
        logger.error(f"Failed to get current branch for {decoded_url}: {e}")
        _raise_api_error("FAILED_TO_GET_CURRENT_BRANCH", "Failed to get the current branch")
    return CurrentBranchResponse(currentBranch=branch.strip())


@router.get("/graph", response_model=CommitGraphResponse)
def get_commit_graph(
    repo_url: Optional[str] = Query(None, alias="repoUrl"),
    limit: Optional[int] = Query(None, ge=1, le=10000),
):
    """Commits across all branches with parent links, newest first."""
    decoded_url = _require_repo_url(repo_url)
    logger.info(f"[GRAPH] Building graph for {decoded_url}")
    try:
        with provisioned_repo(decoded_url) as repo_path:
            graph = build_commit_graph(repo_path, limit)
    except Exception as e:
        logger.error(f"[get_commit_graph] Error for {decoded_url}: {e}")
        _raise_api_error("FAILED_TO_BUILD_GRAPH", "Failed to process the repository")
    return CommitGraphResponse(**graph)
