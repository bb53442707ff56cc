"""
Routes/endpoints for the Abstracts API

HTTP     URI                                   Action
----     ---                                   ------
GET      /api/abstracts/download/[id]          Download the file of an abstract
OPTIONS  /api/abstracts/download/[id]          CORS preflight
"""

from fastapi import APIRouter, Response, status
from core.deps import SessionDep, SettingsDep
from core.logger import logger
from api.abstracts.errors import AbstractDownloadError, ServerError
from api.abstracts.models import (
    FileNotFoundResponse,
    ServerErrorResponse,
)
from api.abstracts import services

router = APIRouter(prefix="/abstracts", tags=["Abstract Endpoints"])

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@router.get(
    "/download/{abstract_id}",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    responses={
        200: {"description": "The abstract file as an attachment"},
        404: {
            "model": FileNotFoundResponse,
            "description": (
                "FILE_NOT_FOUND: the abstract exists but its file could not be "
                "located (body shown). ABSTRACT_NOT_FOUND: no abstract has this "
                "id, the body only has error, errorType and abstractId."
            ),
        },
        500: {"model": ServerErrorResponse},
    },
    tags=["Abstract Endpoints"],
)
def download_abstract(
    session: SessionDep,
    settings: SettingsDep,
    abstract_id: int,
) -> Response:
    """
    Download the document submitted with an abstract.

    The stored file path is tried first; when it is missing or stale the
    uploads folder is searched. X-Resolution-Tier and
    X-Resolution-Confidence report how the file was found.
    """
    logger.info("Download request for abstract %s", abstract_id)
    try:
        return services.download_abstract(
            session=session,
            abstract_id=abstract_id,
            settings=settings,
        )
    except AbstractDownloadError as exc:
        logger.warning("Download of abstract %s failed: %s", abstract_id, exc)
        raise
    except Exception as exc:
        logger.exception("Unexpected error downloading abstract %s", abstract_id)
        raise ServerError(exc, include_trace=settings.INCLUDE_ERROR_TRACE) from exc


@router.options(
    "/download/{abstract_id}",
    status_code=status.HTTP_200_OK,
    include_in_schema=False,
)
def download_abstract_preflight(abstract_id: str) -> Response:
    """
    Answer CORS preflight requests without touching the database.
    """
    return Response(status_code=status.HTTP_200_OK, headers=PREFLIGHT_HEADERS)
