"""
Services for the Abstracts API
"""
import re
from pathlib import Path
from urllib.parse import quote
from fastapi import Response, status
from sqlmodel import select
from core.config import Settings
from core.deps import SessionDep
from core.logger import logger
from api.abstracts.errors import AbstractNotFound
from api.abstracts.models import Abstract, ResolvedFile
from api.abstracts.resolver import resolve_abstract_file

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")

# Integer primary keys are signed 64-bit in every supported database
MAX_ABSTRACT_ID = 2**63 - 1


def get_abstract_by_id(session: SessionDep, abstract_id: int) -> Abstract | None:
    """ Get a specific abstract, or None """
    if not -MAX_ABSTRACT_ID - 1 <= abstract_id <= MAX_ABSTRACT_ID:
        return None
    return session.exec(
        select(Abstract).where(Abstract.id == abstract_id)
    ).first()


def get_content_type(filename: str) -> str:
    """ Map a file name to its MIME type by extension, case-insensitively """
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), DEFAULT_CONTENT_TYPE)


def sanitize_filename(filename: str) -> str:
    """ Replace every character outside [A-Za-z0-9.-] with an underscore """
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def build_download_response(abstract: Abstract, resolved: ResolvedFile) -> Response:
    """
    Read the resolved file and wrap it in a download response.

    The whole file is held in memory; abstracts are small documents.
    """
    content = resolved.path.read_bytes()

    content_type = get_content_type(resolved.display_name)
    if content_type == DEFAULT_CONTENT_TYPE:
        content_type = get_content_type(resolved.path.name)
    clean_name = sanitize_filename(resolved.display_name)

    logger.info(
        "Serving abstract %s as %s (%s, %d bytes)",
        abstract.id, clean_name, content_type, len(content),
    )

    return Response(
        content=content,
        status_code=status.HTTP_200_OK,
        headers={
            "Content-Type": content_type,
            "Content-Disposition": f'attachment; filename="{clean_name}"',
            "Content-Length": str(len(content)),
            "Cache-Control": "private, no-cache",
            "X-Abstract-ID": str(abstract.id),
            "X-Original-Filename": quote(resolved.display_name),
            "X-Resolution-Tier": resolved.tier.value,
            "X-Resolution-Confidence": resolved.confidence.value,
        },
    )


def download_abstract(
    session: SessionDep, abstract_id: int, settings: Settings
) -> Response:
    """
    Look up an abstract, locate its file and return it as an attachment.

    Raises:
        AbstractNotFound: no record with this id
        AbstractFileNotFound: the record exists but its file doesn't
    """
    abstract = get_abstract_by_id(session=session, abstract_id=abstract_id)
    if abstract is None:
        raise AbstractNotFound(abstract_id)

    logger.debug(
        "Abstract %s found: title=%r file_name=%r file_path=%r status=%r",
        abstract.id, abstract.title, abstract.file_name,
        abstract.file_path, abstract.status,
    )

    resolved = resolve_abstract_file(abstract, settings)
    return build_download_response(abstract, resolved)
