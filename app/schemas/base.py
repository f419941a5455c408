from pydantic import BaseModel
from typing import Any, List, Optional, Generic, TypeVar

T = TypeVar('T')


class BaseResponse(BaseModel, Generic[T]):
    """Base response model with success field"""
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success_response(cls, data: T = None, message: str = None):
        """Create a successful response"""
        return cls(success=True, data=data, message=message)

    @classmethod
    def error_response(cls, error: str, message: str = None):
        """Create an error response"""
        return cls(success=False, error=error, message=message)


class MessageResponse(BaseModel):
    """Simple message response with success field"""
    success: bool
    message: str

    @classmethod
    def success_message(cls, message: str):
        """Create a successful message response"""
        return cls(success=True, message=message)


class ErrorBody(BaseModel):
    """Shape of every error returned by the exception handlers in app.main"""
    detail: Any
    status_code: int
    timestamp: float
    path: str
    errors: Optional[List[Any]] = None
