"""
Error taxonomy for the insight core.

ValidationError and DataIntegrityError abort a request; NarrationUnavailable
is caught by the service and degraded into a placeholder insight.
"""

from __future__ import annotations

from typing import Any, List, Optional


class InsightError(Exception):
    """Base class for all structured insight errors."""

    error_type = "InsightError"
    status_code = 500

    def __init__(self, message: str, fields: Optional[List[str]] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])
        self.details = details

    def to_dict(self) -> dict:
        out = {
            "statusCode": self.status_code,
            "message": self.message,
            "errorType": self.error_type,
        }
        if self.fields:
            out["fields"] = self.fields
        if self.details is not None:
            out["details"] = self.details
        return out


class ValidationError(InsightError):
    """Bad caller input: malformed window selector, partial range, bad ratings."""

    error_type = "ValidationError"
    status_code = 400


class DataIntegrityError(InsightError):
    """A stored record does not match the expected entry shape."""

    error_type = "DataIntegrityError"
    status_code = 500


class NarrationUnavailable(InsightError):
    """The narrator failed, timed out, or returned unusable text."""

    error_type = "NarrationUnavailable"
    status_code = 503
