"""
Analysis errors.

Validation is the only failure surface of the aggregation engine.
Lookup gaps and malformed task data are tolerated, not raised.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ValidationCode(str, Enum):
    """Stable codes for analysis validation failures."""
    MISSING_PERIOD = "MISSING_PERIOD"
    INVALID_PERIOD = "INVALID_PERIOD"
    INVERTED_PERIOD = "INVERTED_PERIOD"
    INVALID_FISCAL_MONTH = "INVALID_FISCAL_MONTH"
    INVALID_PRESET = "INVALID_PRESET"
    INVALID_SORT_KEY = "INVALID_SORT_KEY"
    NO_ANALYSIS = "NO_ANALYSIS"


class AnalysisValidationError(ValueError):
    """Raised when analysis input is rejected before any aggregation runs."""

    def __init__(self, code: ValidationCode, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        details: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.field:
            details["field"] = self.field
        return details
