"""HTTP errors raised by the attachment endpoints."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from src.core.structured_logging import log_json

logger = logging.getLogger(__name__)


class AttachmentValidationError(HTTPException):
    """Missing file, disallowed type, oversized payload or malformed id."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AttachmentNotFoundError(HTTPException):
    """Well-formed id with no matching record."""

    def __init__(self, detail: str = "File not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AttachmentStorageError(HTTPException):
    """Unexpected failure reading or writing attachment records.

    The client only ever sees the generic message; the cause is logged.
    """

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


@contextmanager
def storage_errors(message: str, event: str) -> Iterator[None]:
    """Turn anything that is not already an HTTP error into a 500.

    Args:
        message: Generic message returned to the client
        event: Log event name for the underlying failure
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception as exc:
        log_json(
            logger,
            logging.ERROR,
            event,
            error=str(exc),
            exception=exc.__class__.__name__,
        )
        raise AttachmentStorageError(message) from exc
