from __future__ import annotations

from typing import Optional, Sequence


class ServiceError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class ProvisioningError(ServiceError):
    def __init__(self, message: str, code: str = "provisioning_failed") -> None:
        super().__init__(message, code)


class GitCommandError(ServiceError):
    """Raised when a git subprocess exits non-zero or times out."""

    def __init__(
        self,
        message: str,
        code: str = "git_failed",
        *,
        command: Optional[Sequence[str]] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message, code)
        self.command = list(command or [])
        self.stderr = stderr


class ContributionsError(ServiceError):
    def __init__(self, message: str = "could not compute contributions", code: str = "contributions_failed") -> None:
        super().__init__(message, code)


class RepositoryStoreError(ServiceError):
    def __init__(self, message: str, code: str = "repository_store_failed") -> None:
        super().__init__(message, code)
