"""
Error types raised by the link service and the entity stores.

Every error carries the HTTP status it maps to; the handlers registered in
main.py turn them into JSON responses, so routers never build error
responses themselves.
"""

from typing import Optional


class ShortLinkError(Exception):
    """Base class for all application errors"""

    status_code: int = 500
    detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(ShortLinkError):
    """Bad or missing input"""
    status_code = 400
    detail = "Invalid request"


class NotFoundError(ShortLinkError):
    """Unknown slug"""
    status_code = 404
    detail = "URL not found"


class RouteNotFoundError(ShortLinkError):
    """No handler for this method and path"""
    status_code = 404
    detail = "Not found"


class SlugConflictError(ShortLinkError):
    """A custom slug that is already taken"""
    status_code = 409
    detail = "Slug already exists"


class StorageError(ShortLinkError):
    """Entity store unreachable or operation rejected"""
    status_code = 500
    detail = "Storage operation failed"


class RecordExistsError(ShortLinkError):
    """
    Raised by an entity store when a create hits an existing key.

    Stores never overwrite: creation is always create-if-absent.
    """
    status_code = 409
    detail = "Record already exists"
