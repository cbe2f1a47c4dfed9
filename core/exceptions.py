"""
Custom exception classes.

Only invalid configuration is an error. Missing data (no logged period,
no race parameters) is reported through explicit ``None``/no-data results
and never raised.
"""
from typing import Optional


class EngineError(Exception):
    """Base engine exception with consistent structure."""

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.error_code = error_code or "ENGINE_ERROR"


class InvalidConfigurationError(EngineError):
    """Inputs rejected at the boundary before any generation starts."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(detail=detail, error_code=error_code)
        self.field = field


class CatalogError(EngineError):
    """Catalog data could not be read or is malformed."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, error_code="CATALOG_ERROR")
