"""
Errors raised while serving abstract downloads.

Each error knows its HTTP status and renders its own JSON body,
main.py registers a single handler for the base class.
"""

import traceback
from fastapi import status

from api.abstracts.models import (
    Abstract,
    AbstractNotFoundResponse,
    DatabaseFileInfo,
    FileNotFoundResponse,
    ServerErrorResponse,
)


class AbstractDownloadError(Exception):
    """Base class for errors returned to download callers"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "SERVER_ERROR"

    def to_content(self) -> dict:
        raise NotImplementedError


class AbstractNotFound(AbstractDownloadError):
    """No database record for the requested id"""

    status_code = status.HTTP_404_NOT_FOUND
    error_type = "ABSTRACT_NOT_FOUND"

    def __init__(self, abstract_id: int | str):
        super().__init__(f"Abstract {abstract_id} not found")
        self.abstract_id = abstract_id

    def to_content(self) -> dict:
        return AbstractNotFoundResponse(
            error="Abstract not found",
            errorType=self.error_type,
            abstractId=self.abstract_id,
        ).model_dump()


class AbstractFileNotFound(AbstractDownloadError):
    """The record exists but no resolution tier located its file"""

    status_code = status.HTTP_404_NOT_FOUND
    error_type = "FILE_NOT_FOUND"

    def __init__(
        self,
        abstract: Abstract,
        upload_folder_exists: bool,
        available_files: list[str] | None = None,
    ):
        super().__init__(f"No file found for abstract {abstract.id}")
        self.abstract = abstract
        self.upload_folder_exists = upload_folder_exists
        self.available_files = available_files

    def to_content(self) -> dict:
        abstract = self.abstract
        content = FileNotFoundResponse(
            error="File not found on server",
            errorType=self.error_type,
            abstractId=abstract.id,
            abstractTitle=abstract.title,
            abstractAuthor=abstract.author_display,
            abstractNumber=abstract.abstract_number,
            databaseFileInfo=DatabaseFileInfo(
                file_name=abstract.file_name,
                file_path=abstract.file_path,
                file_size=abstract.file_size,
            ),
            suggestion="File may need to be re-uploaded",
            searchAttempted=True,
            uploadFolderExists=self.upload_folder_exists,
            availableFiles=self.available_files,
        )
        if self.available_files is None:
            return content.model_dump(exclude={"availableFiles"})
        return content.model_dump()


class ServerError(AbstractDownloadError):
    """Wraps any failure the resolver and responder did not anticipate"""

    def __init__(self, cause: Exception, include_trace: bool = False):
        super().__init__(str(cause))
        self.cause = cause
        self.include_trace = include_trace

    def to_content(self) -> dict:
        stack = None
        if self.include_trace:
            stack = "".join(
                traceback.format_exception(
                    type(self.cause), self.cause, self.cause.__traceback__
                )
            )
        return ServerErrorResponse(
            error="Download failed",
            errorType=self.error_type,
            details=str(self.cause),
            stack=stack,
        ).model_dump(exclude_none=True)
