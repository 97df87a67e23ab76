from pydantic import BaseModel
from typing import Optional, Any

class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    message: str
    code: str
    error: Optional[str] = None
    details: Optional[Any] = None

class MessageResponse(BaseModel):
    message: str
