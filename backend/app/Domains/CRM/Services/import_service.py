import asyncio
import json
from typing import Any, List, Optional

from loguru import logger

from app.Core.Exceptions.errors import NoValidCustomersError
from app.Domains.CRM.Models.customer import Customer
from app.Domains.CRM.Models.import_result import ImportResult, IntakeCandidate, LeadFilters
from app.Domains.CRM.Repositories.customer_repository import CustomerRepository
from app.Domains.CRM.Repositories.lead_repository import LeadRepository
from app.Domains.CRM.Services import field_normalizer, intake_validator

# Store-managed keys a manual entry must not dictate
_STORE_MANAGED_KEYS = ("id", "_id", "createdAt", "updatedAt", "created_at", "updated_at")


class ImportService:
    """Runs the import pipeline: normalize, validate, then deduplicate into the store.

    Candidates are processed one at a time in input order. A failing candidate
    is counted as an error and never aborts the batch or rolls back earlier inserts.
    """

    def __init__(
        self,
        customer_repository: CustomerRepository,
        lead_repository: LeadRepository,
        timeout_secs: float = 60.0,
    ):
        self.customer_repository = customer_repository
        self.lead_repository = lead_repository
        self.timeout_secs = timeout_secs

    async def import_customers(
        self,
        source: str,
        data: Any = None,
        filters: Optional[LeadFilters] = None,
    ) -> ImportResult:
        field_normalizer.ensure_source(source)

        leads = []
        if source == "crawl":
            leads = await self.lead_repository.find(filters)
            logger.info(f"Fetched {len(leads)} leads for crawl import (filters={filters})")

        candidates = field_normalizer.normalize(source, data, leads)
        logger.info(f"Importing {len(candidates)} candidates from source '{source}'")

        valid, invalid = intake_validator.split_valid(candidates)
        if not valid:
            logger.debug(
                "No valid candidates. Sample of invalid data: "
                + json.dumps(invalid[:3], indent=2, default=str)
            )
            raise NoValidCustomersError()

        result = await self.deduplicate(valid)
        logger.info(
            f"Import from '{source}' finished: total={result.total} imported={result.imported} "
            f"skipped={result.skipped} errors={result.errors}"
        )
        return result

    async def deduplicate(self, candidates: List[IntakeCandidate]) -> ImportResult:
        result = ImportResult(total=len(candidates))
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_secs

        for index, candidate in enumerate(candidates):
            remaining = deadline - loop.time()
            if remaining <= 0:
                self._abandon(result, len(candidates) - index)
                break

            phone_number = candidate.get("phoneNumber")
            try:
                customer = self._build_customer(candidate)
                inserted = await asyncio.wait_for(
                    self.customer_repository.insert_if_absent(customer), timeout=remaining
                )
            except asyncio.TimeoutError:
                self._abandon(result, len(candidates) - index)
                break
            except Exception as e:
                logger.error(f"Error importing customer {phone_number}: {e}")
                result.record_error()
                continue

            if inserted:
                result.record_imported()
            else:
                result.record_skipped(customer.phone_number)

        return result

    def _abandon(self, result: ImportResult, unprocessed: int) -> None:
        logger.warning(
            f"Import exceeded {self.timeout_secs}s; {unprocessed} candidates left unprocessed"
        )
        result.record_error(unprocessed)

    @staticmethod
    def _build_customer(candidate: IntakeCandidate) -> Customer:
        payload = {k: v for k, v in candidate.items() if k not in _STORE_MANAGED_KEYS}
        return Customer.model_validate(payload)
