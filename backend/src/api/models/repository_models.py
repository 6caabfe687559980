from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class ContributionRecord(BaseModel):
    linesAdded: int = Field(..., ge=0)
    linesDeleted: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0)


class ContributionsResponse(BaseModel):
    repoUrl: str
    branch: str
    contributions: Dict[str, Dict[str, ContributionRecord]]


class FileNodeModel(BaseModel):
    name: str
    path: str
    commits: int = 0
    linesAdded: int = 0
    linesDeleted: int = 0
    authors: List[str] = []
    lastModified: Optional[str] = None


class FolderNodeModel(BaseModel):
    name: str
    path: str
    files: List[FileNodeModel] = []
    subfolders: List["FolderNodeModel"] = []


FolderNodeModel.model_rebuild()


class TreeResponse(BaseModel):
    """Repository tree; ``tree`` is an empty list when an author filter matched nothing."""
    tree: Union[FolderNodeModel, List[Any]]
    warning: Optional[str] = None


class CurrentBranchResponse(BaseModel):
    currentBranch: str


class CommitNode(BaseModel):
    hash: str
    parents: List[str] = []
    author: str
    email: str
    date: str
    message: str


class CommitGraphResponse(BaseModel):
    commits: List[CommitNode]
    branches: List[str]
