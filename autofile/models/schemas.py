"""
Pydantic models for AutoFile.

Shared data models across the organizer domain.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Category(str, Enum):
    """Closed classification of file content type."""
    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    ARCHIVE = "archive"
    CODE = "code"
    UNKNOWN = "unknown"


class CategoryRule(BaseModel):
    """Destination rule for one category."""
    model_config = ConfigDict(frozen=True)

    name: str
    destination: Path


class CandidateFolder(BaseModel):
    """Subdirectory scored during subfolder resolution."""
    model_config = ConfigDict(frozen=True)

    path: Path
    name: str
    similarity: float


class OrganizeStatus(str, Enum):
    """Outcome of one pipeline invocation."""
    MOVED = "moved"
    SKIPPED = "skipped"


class OrganizeResult(BaseModel):
    """Result of organizing a single file."""
    source: Path
    status: OrganizeStatus
    category: Optional[Category] = None
    destination: Optional[Path] = None
    reason: Optional[str] = None
