import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger

from app.Core.Exceptions.errors import CRMError, OperationFailedError
from app.dependencies import get_customer_service
from app.Domains.CRM.Models.customer import Customer
from app.Domains.CRM.Models.customer_query import CustomerQuery
from app.Domains.CRM.Services.customer_service import CustomerService
from app.Http.DTOs.crm_schemas import (
    CustomerActionRequest,
    CustomerCreateRequest,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdateRequest,
    MessageResponse,
    Pagination,
)
from app.Http.DTOs.error_schemas import APIErrorResponse

router = APIRouter(prefix="/api/crm/customers", tags=["Customers"])


def _dump(customer: Customer) -> dict:
    return customer.model_dump(mode="json", by_alias=True)


@router.get(
    "",
    response_model=CustomerListResponse,
    summary="List customers",
    description="Filter, search and paginate customers, newest first.",
)
async def list_customers(
    status: Optional[str] = None,
    category: Optional[str] = None,
    country: Optional[str] = None,
    source: Optional[str] = None,
    search: Optional[str] = Query(None, description="Matches name, phone number or email"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    service: CustomerService = Depends(get_customer_service),
):
    query = CustomerQuery(
        status=status,
        category=category,
        country=country,
        source=source,
        search=search,
        page=page,
        limit=limit,
    )
    try:
        customers, total = await service.list_customers(query)
    except Exception as e:
        logger.exception(f"Error fetching customers: {e}")
        raise OperationFailedError("Failed to fetch customers")

    return CustomerListResponse(
        customers=[_dump(c) for c in customers],
        pagination=Pagination(
            page=page, limit=limit, total=total, totalPages=math.ceil(total / limit)
        ),
    )


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=201,
    summary="Create a customer",
    responses={400: {"model": APIErrorResponse}, 409: {"model": APIErrorResponse}},
)
async def create_customer(
    body: CustomerCreateRequest, service: CustomerService = Depends(get_customer_service)
):
    try:
        customer = await service.create_customer(body.model_dump())
    except CRMError:
        raise
    except Exception as e:
        logger.exception(f"Error creating customer: {e}")
        raise OperationFailedError("Failed to create customer")
    return CustomerResponse(customer=_dump(customer))


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Get a customer",
    responses={404: {"model": APIErrorResponse}},
)
async def get_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    try:
        customer = await service.get_customer(customer_id)
    except CRMError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching customer: {e}")
        raise OperationFailedError("Failed to fetch customer")
    return CustomerResponse(customer=_dump(customer))


@router.put(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Update a customer",
    responses={
        400: {"model": APIErrorResponse},
        404: {"model": APIErrorResponse},
        409: {"model": APIErrorResponse},
    },
)
async def update_customer(
    customer_id: str,
    body: CustomerUpdateRequest,
    service: CustomerService = Depends(get_customer_service),
):
    try:
        customer = await service.update_customer(customer_id, body.model_dump(exclude_unset=True))
    except CRMError:
        raise
    except Exception as e:
        logger.exception(f"Error updating customer: {e}")
        raise OperationFailedError("Failed to update customer")
    return CustomerResponse(customer=_dump(customer))


@router.patch(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Change status, add a note or log a contact",
    responses={400: {"model": APIErrorResponse}, 404: {"model": APIErrorResponse}},
)
async def patch_customer(
    customer_id: str,
    body: CustomerActionRequest,
    service: CustomerService = Depends(get_customer_service),
):
    """
    Supported actions: ``update_status`` (data.status), ``add_note`` (data.content)
    and ``add_contact`` (data.type, data.notes, optional data.date).
    """
    try:
        customer = await service.apply_action(customer_id, body.action, body.data)
    except CRMError:
        raise
    except Exception as e:
        logger.exception(f"Error updating customer: {e}")
        raise OperationFailedError("Failed to update customer")
    return CustomerResponse(customer=_dump(customer))


@router.delete(
    "/{customer_id}",
    response_model=MessageResponse,
    summary="Delete a customer",
    responses={404: {"model": APIErrorResponse}},
)
async def delete_customer(
    customer_id: str, service: CustomerService = Depends(get_customer_service)
):
    try:
        await service.delete_customer(customer_id)
    except CRMError:
        raise
    except Exception as e:
        logger.exception(f"Error deleting customer: {e}")
        raise OperationFailedError("Failed to delete customer")
    return MessageResponse(message="Customer deleted successfully")
