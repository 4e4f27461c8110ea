class CatalogError(Exception):
    """
    Base for errors raised by the catalog services.
    Each subclass maps to one HTTP status in the app-level exception handler.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CatalogError):
    status_code = 404


class ConflictError(CatalogError):
    status_code = 409


class ValidationError(CatalogError):
    status_code = 400


class InternalError(CatalogError):
    status_code = 500
