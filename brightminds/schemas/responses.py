"""Standardized API Response Schemas"""

from typing import Generic, TypeVar, Optional, Any
from pydantic import BaseModel


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.

    Example:
        {
            "success": true,
            "data": {"id": "...", "level": 2, "current_xp": 20},
            "message": "Game attempt processed"
        }
    """
    success: bool = True
    data: Optional[T] = None
    message: str = "Operation successful"


class ErrorDetail(BaseModel):
    """Error details structure"""
    code: str
    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """
    Standard error response envelope.

    Example:
        {
            "success": false,
            "error": {
                "code": "ATTEMPT_LIMIT_EXCEEDED",
                "message": "Maximum attempts (3) reached for this game."
            }
        }
    """
    success: bool = False
    error: ErrorDetail
