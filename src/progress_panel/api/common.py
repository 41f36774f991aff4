"""
Common utilities for Progress Panel API routes.

Shared error formatting and the conversion of analysis validation
errors into HTTP responses.
"""

from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum
import logging
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse

from ..analytics import AnalysisValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR CODES - Consistent API Error Classification
# =============================================================================

class ErrorCode(str, Enum):
    """Standard error codes for API responses."""
    BAD_REQUEST = "BAD_REQUEST"


# =============================================================================
# ERROR FORMATTING
# =============================================================================

def format_error_response(
    message: str,
    code: str = ErrorCode.BAD_REQUEST.value,
    details: Optional[Dict] = None,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Format a standard error response with optional details."""
    response = {
        "success": False,
        "error": True,
        "code": code,
        "message": message,
        "timestamp": datetime.utcnow().isoformat(),
    }
    if details:
        response["details"] = details
    if request_id:
        response["request_id"] = request_id
    return response


def format_success_response(data: Dict[str, Any], request_id: Optional[str] = None) -> Dict[str, Any]:
    """Format a standard success response."""
    response = {
        "success": True,
        "timestamp": datetime.utcnow().isoformat(),
        **data,
    }
    if request_id:
        response["request_id"] = request_id
    return response


def generate_request_id() -> str:
    """Generate a unique request ID for tracing."""
    return f"req_{uuid.uuid4().hex[:12]}"


async def analysis_validation_handler(request: Request, exc: AnalysisValidationError) -> JSONResponse:
    """Render an AnalysisValidationError as a 400 with the standard envelope."""
    request_id = generate_request_id()
    logger.info(f"[{request_id}] Rejected {request.url.path}: {exc.code.value} {exc.message}")
    return JSONResponse(
        status_code=400,
        content=format_error_response(
            exc.message,
            code=exc.code.value,
            details=exc.to_dict(),
            request_id=request_id,
        ),
    )
