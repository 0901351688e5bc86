from fastapi import HTTPException, status


class BookingError(HTTPException):
    """Base class for errors raised by the booking core.

    Every subclass carries the HTTP status it maps to, so services can raise
    them directly and the API layer renders them as ``{success, message}``.
    """

    status_code_default = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"

    def __init__(self, detail: str = None):
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.default_detail,
        )

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(BookingError):
    status_code_default = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class NotFoundError(BookingError):
    status_code_default = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ConflictError(BookingError):
    status_code_default = status.HTTP_409_CONFLICT
    default_detail = "Conflicting appointment"


class InternalError(BookingError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
