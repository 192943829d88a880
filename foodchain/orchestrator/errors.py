ERR_MISSING_INPUT = "MISSING_INPUT"
ERR_VALIDATION = "VALIDATION_ERROR"
ERR_ITEM_NOT_FOUND = "ITEM_NOT_FOUND"


class CatalogError(Exception):
    """Base for errors the API turns into a JSON {error: ...} response."""
    code = "CATALOG_ERROR"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class MissingInputError(CatalogError):
    code = ERR_MISSING_INPUT
    status_code = 400


class ValidationError(CatalogError):
    code = ERR_VALIDATION
    status_code = 400

    def __init__(self, message: str = "", details: list | None = None):
        super().__init__(message)
        self.details = details or []


class ItemNotFoundError(CatalogError):
    code = ERR_ITEM_NOT_FOUND
    status_code = 404
