"""Maps lifecycle errors onto HTTP responses.

Every CertificationError becomes::

    {"detail": "<message>", "error": "<kind>", "code": <int>}

so clients can branch on ``error``/``code`` rather than on prose.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from certissuer.services import errors

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[errors.CertificationError], int] = {
    errors.Unauthorized: status.HTTP_403_FORBIDDEN,
    errors.Paused: status.HTTP_423_LOCKED,
    errors.NotFound: status.HTTP_404_NOT_FOUND,
    errors.AlreadyCertified: status.HTTP_409_CONFLICT,
    errors.NotExpired: status.HTTP_409_CONFLICT,
    errors.InvalidStatus: status.HTTP_409_CONFLICT,
    errors.RequirementsNotMet: status.HTTP_422_UNPROCESSABLE_CONTENT,
    errors.MetadataTooLong: status.HTTP_422_UNPROCESSABLE_CONTENT,
    errors.EvidenceLimitExceeded: status.HTTP_422_UNPROCESSABLE_CONTENT,
    errors.TooManyActivities: status.HTTP_422_UNPROCESSABLE_CONTENT,
    errors.ReasonTooLong: status.HTTP_422_UNPROCESSABLE_CONTENT,
    errors.InvalidTeacher: status.HTTP_422_UNPROCESSABLE_CONTENT,
    errors.InvalidType: status.HTTP_422_UNPROCESSABLE_CONTENT,
    errors.InvalidPeriod: status.HTTP_422_UNPROCESSABLE_CONTENT,
}


def status_for(exc: errors.CertificationError) -> int:
    return _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)


def register_error_handlers(app: FastAPI) -> None:
    """Register the lifecycle error handler on the FastAPI app."""

    @app.exception_handler(errors.CertificationError)
    async def certification_error_handler(
        request: Request, exc: errors.CertificationError
    ) -> JSONResponse:
        logger.info(
            "%s %s rejected: %s",
            request.method,
            request.url.path,
            exc.kind,
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=status_for(exc),
            content={"detail": exc.detail, "error": exc.kind, "code": exc.code},
        )
