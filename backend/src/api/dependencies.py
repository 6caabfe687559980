from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from fastapi import HTTPException, status

from services.errors import RepositoryStoreError
from services.repository_store import RepositoryStore

logger = logging.getLogger(__name__)

_repository_store: Optional[RepositoryStore] = None
_repository_store_lock = Lock()


def get_repository_store() -> RepositoryStore:
    """Get or create the RepositoryStore singleton (thread-safe)."""
    global _repository_store
    if _repository_store is None:
        with _repository_store_lock:
            if _repository_store is None:
                try:
                    _repository_store = RepositoryStore()
                except RepositoryStoreError as exc:
                    logger.error(f"Repository store unavailable: {exc}")
                    raise HTTPException(
                        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        detail={"code": exc.code, "message": "Repository store is not configured"},
                    )
    return _repository_store
