from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from app.Domains.CRM.Models.import_result import ImportResult, LeadFilters

# --- Import ---


class ImportRequest(BaseModel):
    # Checked by the service: an unknown or missing source is a 400, not a 422
    source: Optional[str] = None
    data: Optional[Union[List[Any], Dict[str, Any]]] = None
    filters: Optional[LeadFilters] = None

    class Config:
        json_schema_extra = {
            "example": {
                "source": "manual",
                "data": [{"name": "Jane", "phoneNumber": "555-0100"}],
            }
        }


class ImportResponse(BaseModel):
    success: bool = True
    results: ImportResult


# --- Customers ---


class CustomerCreateRequest(BaseModel):
    name: Optional[str] = None
    phoneNumber: Optional[str] = None
    email: Optional[str] = None
    instagram: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    country: Optional[str] = None
    category: Optional[str] = None
    source: Optional[str] = "manual"


class CustomerUpdateRequest(BaseModel):
    name: Optional[str] = None
    phoneNumber: Optional[str] = None
    email: Optional[str] = None
    instagram: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    country: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None


class CustomerActionRequest(BaseModel):
    action: str
    data: Dict[str, Any] = Field(default_factory=dict)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class CustomerListResponse(BaseModel):
    success: bool = True
    customers: List[Dict[str, Any]]
    pagination: Pagination


class CustomerResponse(BaseModel):
    success: bool = True
    customer: Dict[str, Any]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class LeadDebugResponse(BaseModel):
    success: bool = True
    totalCount: int
    sampleData: Optional[Dict[str, Any]] = None
    fieldNames: List[str] = Field(default_factory=list)
