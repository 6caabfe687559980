"""Provision and release isolated working copies of remote repositories."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import logging
import shutil
import tempfile
from typing import Iterator, Optional

from config.config_manager import get_config
from local_analysis.git_repo import clone_repo
from services.errors import GitCommandError, ProvisioningError

logger = logging.getLogger(__name__)


def prepare_repo(repo_url: str, workspace_dir: Optional[str] = None) -> str:
    """Clone ``repo_url`` into a fresh directory and return its path.

    Every call gets its own directory, so concurrent requests never share a
    working copy.

    Raises:
        ProvisioningError: If the URL is empty or the clone fails
    """
    if not repo_url or not repo_url.strip():
        raise ProvisioningError("Repository URL is required", code="repo_url_required")

    root = Path(workspace_dir or get_config().workspace_dir)
    try:
        root.mkdir(parents=True, exist_ok=True)
        repo_path = tempfile.mkdtemp(prefix="repo-", dir=str(root))
    except OSError as exc:
        raise ProvisioningError(f"Could not create working directory under {root}: {exc}") from exc

    try:
        clone_repo(repo_url.strip(), repo_path, str(root))
    except GitCommandError as exc:
        clean_repo(repo_path)
        raise ProvisioningError(f"Failed to clone {repo_url}: {exc}") from exc

    logger.info(f"Cloned {repo_url} into {repo_path}")
    return repo_path


def clean_repo(repo_path: Optional[str]) -> None:
    """Remove a working copy. Safe to call more than once."""
    if not repo_path:
        return
    shutil.rmtree(repo_path, ignore_errors=True)
    logger.debug(f"Removed working copy {repo_path}")


@contextmanager
def provisioned_repo(repo_url: str, workspace_dir: Optional[str] = None) -> Iterator[str]:
    """Yield a fresh working copy of ``repo_url`` and always remove it afterwards."""
    repo_path = prepare_repo(repo_url, workspace_dir)
    try:
        yield repo_path
    finally:
        clean_repo(repo_path)
