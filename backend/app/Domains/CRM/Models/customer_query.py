from typing import Optional

from pydantic import BaseModel, Field


class CustomerQuery(BaseModel):
    status: Optional[str] = None
    category: Optional[str] = None
    country: Optional[str] = None
    source: Optional[str] = None
    search: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=500)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
