"""Custom exception classes."""

from fastapi import HTTPException, status


class NotaException(Exception):
    """Base exception for Nota application."""

    kind = "error"
    retryable = False

    def __init__(self, detail: str = "Unexpected error"):
        self.detail = detail
        super().__init__(detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=self.detail,
        )


class NotFoundError(NotaException):
    """Raised when a note (or other resource) does not exist."""

    kind = "not_found"

    def __init__(self, resource: str = "Resource", detail: str | None = None):
        super().__init__(detail or f"{resource} not found")

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=self.detail,
        )


class ConstraintError(NotaException):
    """Raised on a storage uniqueness or integrity violation."""

    kind = "constraint"

    def __init__(self, detail: str = "Storage constraint violated"):
        super().__init__(detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=self.detail,
        )


class StorageError(NotaException):
    """Raised when storage or backup I/O fails transiently."""

    kind = "storage"
    retryable = True

    def __init__(self, detail: str = "Storage unavailable"):
        super().__init__(detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=self.detail,
        )


class ParseError(NotaException):
    """Raised when backup input is not a sequence of note records."""

    kind = "parse"

    def __init__(self, detail: str = "Malformed backup"):
        super().__init__(detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=self.detail,
        )
