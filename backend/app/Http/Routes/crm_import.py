from fastapi import APIRouter, Depends
from loguru import logger

from app.Core.Exceptions.errors import CRMError, OperationFailedError
from app.dependencies import get_import_service, get_lead_repository
from app.Domains.CRM.Repositories.lead_repository import LeadRepository
from app.Domains.CRM.Services.import_service import ImportService
from app.Http.DTOs.crm_schemas import ImportRequest, ImportResponse, LeadDebugResponse
from app.Http.DTOs.error_schemas import APIErrorResponse

router = APIRouter(prefix="/api/crm", tags=["CRM Import"])


@router.post(
    "/import",
    response_model=ImportResponse,
    summary="Import customers",
    description="Import customers from crawled leads, parsed spreadsheet rows or manual entries, "
    "skipping any whose phone number is already known.",
    responses={400: {"model": APIErrorResponse}, 500: {"model": APIErrorResponse}},
)
async def import_customers(
    body: ImportRequest, service: ImportService = Depends(get_import_service)
):
    """
    Runs the import pipeline and reports how many candidates were imported,
    skipped as duplicates, or failed.
    """
    try:
        results = await service.import_customers(body.source, body.data, body.filters)
    except CRMError:
        raise
    except Exception as e:
        logger.exception(f"Error importing customers: {e}")
        raise OperationFailedError("Failed to import customers")

    return ImportResponse(results=results)


@router.get(
    "/debug",
    response_model=LeadDebugResponse,
    summary="Inspect the lead store",
    description="Count crawled leads and show one raw sample with its field names.",
    responses={500: {"model": APIErrorResponse}},
)
async def debug_leads(repository: LeadRepository = Depends(get_lead_repository)):
    try:
        count = await repository.count()
        sample = await repository.first()
    except Exception as e:
        logger.exception(f"Debug error: {e}")
        raise OperationFailedError("Failed to fetch debug info")

    return LeadDebugResponse(
        totalCount=count, sampleData=sample, fieldNames=list(sample.keys()) if sample else []
    )
