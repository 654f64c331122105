from pydantic import BaseModel
from typing import Optional, Any

class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None

class MessageResponse(BaseModel):
    """
    Plain acknowledgement returned by state-changing endpoints.
    """
    success: bool = True
    message: Optional[str] = None
