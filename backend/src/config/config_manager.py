"""
Service configuration.

Settings are read from environment variables (a local .env file is loaded
first when present). The resulting ServiceConfig is cached; call
reset_config() after changing the environment in tests.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
import tempfile
from threading import Lock
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"
DEFAULT_GIT_TIMEOUT_SECONDS = 300
DEFAULT_GRAPH_COMMIT_LIMIT = 500
DEFAULT_REPOSITORIES_TABLE = "repositories"


@dataclass(frozen=True)
class ServiceConfig:
    """Runtime settings for the repository contributions service."""
    workspace_dir: str
    default_branch: str = DEFAULT_BRANCH
    git_timeout_seconds: float = DEFAULT_GIT_TIMEOUT_SECONDS
    graph_commit_limit: int = DEFAULT_GRAPH_COMMIT_LIMIT
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    repositories_table: str = DEFAULT_REPOSITORIES_TABLE
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {name}: {raw!r}")
        return default


def load_config() -> ServiceConfig:
    """Build a ServiceConfig from the current environment."""
    origins = os.getenv("CORS_ORIGINS", "*")
    return ServiceConfig(
        workspace_dir=os.getenv("REPO_WORKSPACE_DIR") or tempfile.gettempdir(),
        default_branch=os.getenv("DEFAULT_BRANCH") or DEFAULT_BRANCH,
        git_timeout_seconds=_int_env("GIT_TIMEOUT_SECONDS", DEFAULT_GIT_TIMEOUT_SECONDS),
        graph_commit_limit=_int_env("GRAPH_COMMIT_LIMIT", DEFAULT_GRAPH_COMMIT_LIMIT),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=(
            os.getenv("SUPABASE_KEY")
            or os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        ),
        repositories_table=os.getenv("REPOSITORIES_TABLE") or DEFAULT_REPOSITORIES_TABLE,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
    )


_config: Optional[ServiceConfig] = None
_config_lock = Lock()


def get_config() -> ServiceConfig:
    """Return the cached ServiceConfig, loading it on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_config()
    return _config


def reset_config() -> None:
    global _config
    with _config_lock:
        _config = None
