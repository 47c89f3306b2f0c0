from typing import Any, List, Optional

from pydantic import BaseModel


class APIErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[List[Any]] = None
