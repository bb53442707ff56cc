"""
Models for the Abstracts API
"""

from enum import Enum
from pathlib import Path
from sqlmodel import SQLModel, Field
from pydantic import ConfigDict


class Abstract(SQLModel, table=True):
    """
    A submitted conference abstract.

    The table is owned by the submission side of the application,
    this service only reads it.
    """
    id: int | None = Field(default=None, primary_key=True)
    title: str | None = Field(default=None, max_length=1024)
    presenter_name: str | None = Field(default=None, max_length=255)
    author: str | None = Field(default=None, max_length=255)
    abstract_number: str | None = Field(default=None, max_length=100)
    status: str | None = Field(default=None, max_length=50)

    # Upload metadata, file_path is a hint and may be stale
    file_name: str | None = Field(default=None, max_length=255)
    file_path: str | None = Field(default=None, max_length=1024)
    file_size: int | None = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def author_display(self) -> str | None:
        return self.presenter_name or self.author


class ResolutionTier(str, Enum):
    """Strategy that located an abstract's file"""

    DIRECT_PATH = "direct_path"
    NAMING_CONVENTION = "naming_convention"
    EXTENSION_FALLBACK = "extension_fallback"


class Confidence(str, Enum):
    """How strongly a resolved file correlates with its abstract"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ResolvedFile(SQLModel):
    """A file on disk chosen for an abstract"""

    path: Path
    display_name: str
    tier: ResolutionTier
    confidence: Confidence
    reason: str


class DatabaseFileInfo(SQLModel):
    """Upload metadata as recorded in the database"""

    file_name: str | None = None
    file_path: str | None = None
    file_size: int | None = None


class AbstractNotFoundResponse(SQLModel):
    """Body returned when no abstract has the requested id"""

    error: str
    errorType: str
    abstractId: int | str


class FileNotFoundResponse(SQLModel):
    """Body returned when an abstract exists but none of its files do"""

    error: str
    errorType: str
    abstractId: int
    abstractTitle: str | None = None
    abstractAuthor: str | None = None
    abstractNumber: str | None = None
    databaseFileInfo: DatabaseFileInfo
    suggestion: str
    searchAttempted: bool
    uploadFolderExists: bool
    availableFiles: list[str] | None = None


class ServerErrorResponse(SQLModel):
    """Body returned for unexpected failures"""

    error: str
    errorType: str
    details: str
    stack: str | None = None
