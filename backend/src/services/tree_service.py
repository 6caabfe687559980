"""Build a folder tree of a working copy annotated with per-file history stats."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from local_analysis import git_repo

logger = logging.getLogger(__name__)


@dataclass
class FileNode:
    name: str
    path: str
    commits: int = 0
    lines_added: int = 0
    lines_deleted: int = 0
    authors: List[str] = field(default_factory=list)
    last_modified: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "commits": self.commits,
            "linesAdded": self.lines_added,
            "linesDeleted": self.lines_deleted,
            "authors": list(self.authors),
            "lastModified": self.last_modified,
        }


@dataclass
class FolderNode:
    name: str
    path: str
    files: List[FileNode] = field(default_factory=list)
    subfolders: List["FolderNode"] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.files and not self.subfolders

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "files": [f.to_dict() for f in self.files],
            "subfolders": [s.to_dict() for s in self.subfolders],
        }


def _file_stats(commits: List[Dict[str, Any]]) -> Dict[str, FileNode]:
    """Per-path stats, crediting commits made before a rename to the new path."""
    stats: Dict[str, FileNode] = {}
    renamed_to: Dict[str, str] = {}
    for commit in commits:
        for change in commit["files"]:
            path = renamed_to.get(change["path"], change["path"])
            if change.get("previous"):
                # older commits of the source path belong to this file
                renamed_to[change["previous"]] = path
            node = stats.get(path)
            if node is None:
                node = stats[path] = FileNode(name=path.rsplit("/", 1)[-1], path=path)
            node.commits += 1
            node.lines_added += change["added"]
            node.lines_deleted += change["deleted"]
            if commit["author"] and commit["author"] not in node.authors:
                node.authors.append(commit["author"])
            # log is newest first
            if node.last_modified is None:
                node.last_modified = commit["date"] or None
    return stats


def _insert(root: FolderNode, node: FileNode) -> None:
    parts = node.path.split("/")
    folder = root
    for depth, part in enumerate(parts[:-1]):
        child = next((s for s in folder.subfolders if s.name == part), None)
        if child is None:
            child = FolderNode(name=part, path="/".join(parts[: depth + 1]))
            folder.subfolders.append(child)
        folder = child
    folder.files.append(node)


def _sort(folder: FolderNode) -> None:
    folder.files.sort(key=lambda f: f.name)
    folder.subfolders.sort(key=lambda s: s.name)
    for sub in folder.subfolders:
        _sort(sub)


def build_repository_tree(
    repo_path: str,
    *,
    author: Optional[str] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
) -> FolderNode:
    """Build the tree for the checked-out revision of ``repo_path``.

    Without filters every tracked file is listed. With ``author``, ``since``
    or ``until`` only tracked files touched by matching commits are listed,
    and their stats only count those commits.
    """
    commits = git_repo.log_numstat(repo_path, author=author, since=since, until=until)
    stats = _file_stats(commits)
    filtered = bool(author or since or until)

    paths = git_repo.list_tracked_files(repo_path)
    if filtered:
        paths = [p for p in paths if p in stats]

    root = FolderNode(name="", path="")
    for path in paths:
        _insert(root, stats.get(path) or FileNode(name=path.rsplit("/", 1)[-1], path=path))
    _sort(root)

    logger.info(
        f"Built tree for {repo_path} with {len(paths)} file(s)"
        + (f" (author={author}, since={since}, until={until})" if filtered else "")
    )
    return root
