from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.Domains.CRM.Models.import_result import LeadFilters


class LeadRepository(ABC):
    """Read-only access to crawled leads, returned as raw documents."""

    @abstractmethod
    async def find(self, filters: Optional[LeadFilters] = None) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    @abstractmethod
    async def first(self) -> Optional[Dict[str, Any]]:
        pass
