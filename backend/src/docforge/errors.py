"""Client-facing error types."""

from typing import Any


class ApiError(Exception):
    """An error that should surface to the API client with a status code.

    The status falls back to the class-level ``status`` when not given,
    so subclasses only need to declare their code.
    """

    status: int = 500

    def __init__(self, status: int | None = None, message: str = ""):
        super().__init__(message)
        self.message = message
        self.status = status or type(self).status or 500

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidArgumentError(ApiError):
    """The caller supplied an argument of the wrong shape (bad request)."""

    status = 400


class InvalidSortSpecificationError(InvalidArgumentError):
    """Sort specification is neither a sequence nor a mapping."""

    pass


class ForbiddenError(ApiError):
    """A listener chain denied the operation."""

    status = 403


class NotFoundError(ApiError):
    status = 404
