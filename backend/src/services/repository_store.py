"""Lookup of registered repositories in Supabase."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional

from supabase import Client, create_client

from config.config_manager import get_config
from services.errors import RepositoryStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepositoryRecord:
    id: str
    url: str
    name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RepositoryRecord":
        return cls(id=str(row["id"]), url=row["url"], name=row.get("name"))


class RepositoryStore:
    """Read access to the repositories table.

    Only used to confirm that a repository URL is registered before any git
    work is done for it.
    """

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        *,
        table: Optional[str] = None,
    ):
        config = get_config()
        self.supabase_url = supabase_url or config.supabase_url
        self.supabase_key = supabase_key or config.supabase_key
        self.table = table or config.repositories_table

        if not self.supabase_url or not self.supabase_key:
            raise RepositoryStoreError("Supabase credentials not configured.", code="configuration_error")

        try:
            self.client: Client = create_client(self.supabase_url, self.supabase_key)
        except Exception as exc:
            raise RepositoryStoreError(f"Failed to initialize Supabase client: {exc}") from exc

    def find_by_url(self, url: str) -> Optional[RepositoryRecord]:
        """Return the record registered for ``url``, or None.

        Raises:
            RepositoryStoreError: If the query fails
        """
        try:
            response = (
                self.client.table(self.table)
                .select("id, url, name")
                .eq("url", url)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            logger.error(f"Failed to look up repository {url}: {exc}")
            raise RepositoryStoreError(f"Failed to look up repository: {exc}") from exc

        if not response.data:
            return None
        return RepositoryRecord.from_row(response.data[0])
