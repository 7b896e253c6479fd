"""Error kinds raised by the catalog core.

Routes never catch these; the handlers registered in ``app.main`` turn them
into ``{"success": false, "message": ..., "errors": [...]}`` responses.
"""

from typing import List, Optional


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class NotFoundError(CatalogError):
    status_code = 404

    def __init__(self, entity: str, identifier):
        super().__init__(f"{entity} not found: {identifier}")
        self.entity = entity
        self.identifier = identifier


class ValidationError(CatalogError):
    """One or more field-level violations, reported together."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message, errors)


class InvalidTransitionError(CatalogError):
    status_code = 400

    def __init__(self, current_state: str, attempted_state: str):
        super().__init__(
            f"Invalid state transition: {current_state} -> {attempted_state}"
        )
        self.current_state = current_state
        self.attempted_state = attempted_state


class ConflictError(CatalogError):
    status_code = 409
