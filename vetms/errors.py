# vetms/errors.py
"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to and an optional list of
field-level issues, so the API can hand them back to the UI verbatim.
"""

from typing import Dict, List, Optional


class VetmsError(Exception):
    status_code = 500

    def __init__(self, message: str, issues: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.issues = issues or []

    def to_dict(self) -> dict:
        return {"detail": self.message, "issues": self.issues}


class ValidationError(VetmsError):
    """Malformed or incomplete input, or a violated business rule."""

    status_code = 400

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, issues=[{"field": field, "message": message}])


class NotFoundError(VetmsError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    # reported against the submitted draft
    status_code = 400

    def __init__(self, product_id: int, field: Optional[str] = None):
        issues = [{"field": field, "message": "Product not found"}] if field else None
        super().__init__("Product not found", issues=issues)
        self.product_id = product_id


class ConflictError(VetmsError):
    status_code = 409
