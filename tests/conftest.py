"""
Pytest configuration and fixtures
"""
from pathlib import Path
import os
import subprocess
import sys
from typing import Callable, Dict, Optional

import pytest


# Define paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
BACKEND_SRC = PROJECT_ROOT / "backend" / "src"

# Ensure the backend src directory is on sys.path so imports resolve.
if str(BACKEND_SRC) not in sys.path:
    sys.path.insert(0, str(BACKEND_SRC))

# Set required env vars BEFORE importing so config checks pass.
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-service-role-key")

from config.config_manager import reset_config  # noqa: E402


def run(cmd, cwd):
    subprocess.check_call(cmd, cwd=cwd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)


def git_commit(repo_dir, author: str, message: str, files: Dict[str, Optional[bytes]]):
    """Write (or delete, when the content is None) files and commit them as ``author``."""
    repo_dir = Path(repo_dir)
    for rel, content in files.items():
        target = repo_dir / rel
        if content is None:
            run(["git", "rm", "-q", rel], repo_dir)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        run(["git", "add", rel], repo_dir)
    run([
        "git",
        "-c", f"user.name={author}",
        "-c", f"user.email={author.lower().replace(' ', '.')}@example.com",
        "-c", "commit.gpgsign=false",
        "commit", "-m", message, "-q",
    ], repo_dir)


def git_init(repo_dir, branch: str = "main"):
    Path(repo_dir).mkdir(parents=True, exist_ok=True)
    run(["git", "init", "-q"], repo_dir)
    run(["git", "symbolic-ref", "HEAD", f"refs/heads/{branch}"], repo_dir)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Clone working copies under the test's tmp dir and reload config per test."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    monkeypatch.setenv("REPO_WORKSPACE_DIR", str(workspace))
    monkeypatch.setenv("DEFAULT_BRANCH", "main")
    reset_config()
    yield workspace
    reset_config()


@pytest.fixture
def workspace_dir(isolated_config) -> Path:
    return isolated_config


@pytest.fixture
def make_origin(tmp_path) -> Callable[..., Path]:
    """Factory for an "origin" repository that tests clone through its path."""
    def _make(name: str = "origin", branch: str = "main") -> Path:
        repo_dir = tmp_path / name
        git_init(repo_dir, branch)
        return repo_dir
    return _make


@pytest.fixture
def sample_origin(make_origin) -> Path:
    """Two authors on a text file, one binary file, one renamed file."""
    repo = make_origin()
    git_commit(repo, "Alice", "readme", {"readme.txt": b"".join(b"line %d\n" % i for i in range(10))})
    git_commit(repo, "Carol", "logo", {"assets/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00binary"})
    git_commit(repo, "Bob", "more readme", {"readme.txt": b"".join(b"line %d\n" % i for i in range(15))})
    git_commit(repo, "Alice", "add module", {"src/old_name.py": b"a = 1\nb = 2\n"})
    run(["git", "mv", "src/old_name.py", "src/new_name.py"], repo)
    git_commit(repo, "Bob", "rename", {})
    git_commit(repo, "Bob", "extend module", {"src/new_name.py": b"a = 1\nb = 2\nc = 3\n"})
    return repo
