from __future__ import annotations
import logging
from subprocess import run, CalledProcessError, TimeoutExpired, PIPE
from datetime import datetime
from typing import List, Dict, Any, Optional, Sequence, Tuple

from config.config_manager import get_config
from local_analysis.file_utils import is_quoted, normalize_path, unquote_git_path
from services.errors import GitCommandError

logger = logging.getLogger(__name__)

# Separators emitted by --pretty via %x1f and %x1e. Python treats both as
# whitespace, so output containing them is never stripped.
_SEP = "\x1f"
_COMMIT_MARKER = "\x1e"

# print non-ASCII names verbatim instead of as octal escapes
_VERBATIM_PATHS = ["-c", "core.quotePath=false"]


def _git(args: Sequence[str], cwd: str, *, strip: bool = True) -> str:
    cmd = ["git", *args]
    logger.debug(f"Running {' '.join(cmd)} in {cwd}")
    try:
        proc = run(
            cmd,
            cwd=cwd,
            stdout=PIPE,
            stderr=PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=get_config().git_timeout_seconds,
            check=True,
        )
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitCommandError(
            f"git {' '.join(args)} failed with exit code {exc.returncode}: {stderr}",
            command=cmd,
            stderr=stderr,
        ) from exc
    except TimeoutExpired as exc:
        raise GitCommandError(
            f"git {' '.join(args)} timed out after {exc.timeout}s",
            code="git_timeout",
            command=cmd,
        ) from exc
    except FileNotFoundError as exc:
        raise GitCommandError("git executable not found", code="git_missing", command=cmd) from exc
    return proc.stdout.strip() if strip else proc.stdout


def clone_repo(repo_url: str, dest: str, cwd: str) -> None:
    _git(["clone", "--quiet", repo_url, dest], cwd)


def sync_branch(repo_dir: str, branch: str) -> None:
    """Fetch with pruning, check out ``branch`` and force-pull it from origin."""
    _git(["fetch", "--prune", "origin"], repo_dir)
    _git(["checkout", branch], repo_dir)
    _git(["pull", "--force", "origin", branch], repo_dir)


def list_tracked_files(repo_dir: str) -> List[str]:
    raw = _git([*_VERBATIM_PATHS, "ls-files", "-z"], repo_dir, strip=False)
    return [p for p in (normalize_path(entry) for entry in raw.split("\0")) if p]


def file_history_numstat(repo_dir: str, path: str) -> List[str]:
    """Author line followed by numstat lines for every commit touching ``path``."""
    raw = _git(
        [*_VERBATIM_PATHS, "log", "--pretty=format:%an", "--numstat", "--follow", "--", path],
        repo_dir,
        strip=False,
    )
    return raw.split("\n")


def file_first_authors(repo_dir: str, path: str) -> List[str]:
    """Authors of commits touching ``path``, oldest first."""
    raw = _git(["log", "--format=%an", "--follow", "--reverse", "--", path], repo_dir)
    return raw.split("\n") if raw else []


def current_branch(repo_dir: str) -> str:
    return _git(["rev-parse", "--abbrev-ref", "HEAD"], repo_dir)


def list_branches(repo_dir: str) -> List[str]:
    """Local and origin branch names, with the remote prefix removed."""
    raw = _git(["branch", "-a", "--format=%(refname:short)"], repo_dir)
    branches: List[str] = []
    for line in raw.splitlines():
        name = line.strip()
        if not name or name.endswith("/HEAD") or name in ("origin", "HEAD"):
            continue
        if name.startswith("remotes/"):
            name = name[len("remotes/"):]
        if name.startswith("origin/"):
            name = name[len("origin/"):]
        if name not in branches:
            branches.append(name)
    return branches


def branch_exists(repo_dir: str, branch: str) -> bool:
    return branch in list_branches(repo_dir)


def _iso(date: Optional[datetime]) -> Optional[str]:
    # git does not parse fractional seconds
    return date.replace(microsecond=0).isoformat() if date else None


def log_numstat(
    repo_dir: str,
    *,
    author: Optional[str] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Commits with their per-file numstat, newest first.

    Each entry is ``{"author", "date", "files": [{"path", "previous", "added",
    "deleted"}]}`` where ``previous`` is the source path of a rename, else None.
    An ``author`` filter matches the author name exactly.
    """
    args = [*_VERBATIM_PATHS, "log", "-M", "--pretty=format:%x1e%an%x1f%aI", "--numstat"]
    if author:
        # git treats --author as a regex; match literally, then exactly below
        args += ["--fixed-strings", f"--author={author}"]
    if since:
        args.append(f"--since={_iso(since)}")
    if until:
        args.append(f"--until={_iso(until)}")
    args.append("--")

    try:
        raw = _git(args, repo_dir, strip=False)
    except GitCommandError as exc:
        # A repository without commits has no HEAD to log from.
        if "does not have any commits" in exc.stderr:
            return []
        raise

    commits: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None
    for line in raw.split("\n"):
        if line.startswith(_COMMIT_MARKER):
            name, _, date = line[1:].partition(_SEP)
            current = {"author": name.strip(), "date": date.strip(), "files": []}
            if not author or current["author"] == author:
                commits.append(current)
            continue
        if current is None or "\t" not in line:
            continue
        parts = line.split("\t", 2)
        if len(parts) < 3:
            continue
        previous, path = split_rename(parts[2])
        current["files"].append(
            {
                "path": path,
                "previous": previous,
                "added": _to_int(parts[0]),
                "deleted": _to_int(parts[1]),
            }
        )
    return commits


def commit_log(repo_dir: str, limit: int) -> List[Dict[str, Any]]:
    """Commits across all refs, newest first, at most ``limit`` entries."""
    fmt = "%x1f".join(["%H", "%P", "%an", "%ae", "%aI", "%s"])
    try:
        raw = _git(
            ["log", "--all", f"--max-count={limit}", f"--pretty=format:{fmt}"],
            repo_dir,
            strip=False,
        )
    except GitCommandError as exc:
        if "does not have any commits" in exc.stderr:
            return []
        raise

    commits = []
    for line in raw.split("\n"):
        parts = line.split(_SEP)
        if len(parts) != 6:
            continue
        sha, parents, name, email, date, subject = parts
        commits.append(
            {
                "hash": sha,
                "parents": parents.split() if parents else [],
                "author": name,
                "email": email,
                "date": date,
                "message": subject,
            }
        )
    return commits


def _to_int(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


def split_rename(path: str) -> Tuple[Optional[str], str]:
    """Split numstat rename notation into ``(old, new)``.

    ``old.txt => new.txt`` gives ``("old.txt", "new.txt")`` and
    ``src/{a => b}/f.py`` gives ``("src/a/f.py", "src/b/f.py")``. A plain path
    gives ``(None, path)``.
    """
    path = path.strip()
    if is_quoted(path):
        path = unquote_git_path(path)
    if " => " not in path:
        return None, normalize_path(path)
    if "{" in path and "}" in path:
        prefix, rest = path.split("{", 1)
        middle, suffix = rest.split("}", 1)
        old, new = middle.split(" => ", 1)
        return normalize_path(f"{prefix}{old}{suffix}"), normalize_path(f"{prefix}{new}{suffix}")
    old, new = path.split(" => ", 1)
    return normalize_path(old), normalize_path(new)
