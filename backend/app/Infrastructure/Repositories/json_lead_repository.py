import json
import os
from typing import Any, Dict, List, Optional

import aiofiles
from loguru import logger

from app.Domains.CRM.Models.import_result import LeadFilters
from app.Domains.CRM.Repositories.lead_repository import LeadRepository


class JsonLeadRepository(LeadRepository):
    """Reads crawled leads from a JSON file written by the crawler.

    The file is re-read on every call since the crawler owns it. Documents are
    returned untouched, legacy keys (``phoneNNumber``, ``adress``) included.
    """

    def __init__(self, data_path: str):
        self.data_path = data_path

    async def _load(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.data_path):
            return []

        async with aiofiles.open(self.data_path, "r") as f:
            content = await f.read()
        if not content.strip():
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Lead store {self.data_path} is not valid JSON: {e}")
            raise

        if isinstance(data, dict):
            data = data.get("leads", [])
        return [lead for lead in data if isinstance(lead, dict)]

    @staticmethod
    def _lead_id(lead: Dict[str, Any]) -> Optional[str]:
        lead_id = lead.get("id", lead.get("_id"))
        return str(lead_id) if lead_id is not None else None

    async def find(self, filters: Optional[LeadFilters] = None) -> List[Dict[str, Any]]:
        leads = await self._load()
        if not filters:
            return leads

        ids = set(filters.ids)
        results = []
        for lead in leads:
            if filters.country and lead.get("country") != filters.country:
                continue
            if filters.category and lead.get("category") != filters.category:
                continue
            if ids and self._lead_id(lead) not in ids:
                continue
            results.append(lead)
        return results

    async def count(self) -> int:
        return len(await self._load())

    async def first(self) -> Optional[Dict[str, Any]]:
        leads = await self._load()
        return leads[0] if leads else None
