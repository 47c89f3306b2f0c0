from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

IMPORT_SOURCES = ("crawl", "excel", "manual")

# Transient, normalized record awaiting validation and deduplication
IntakeCandidate = Dict[str, Any]


class LeadFilters(BaseModel):
    country: Optional[str] = None
    category: Optional[str] = None
    ids: List[str] = Field(default_factory=list)


class ImportResult(BaseModel):
    """Outcome tally of one import batch.

    Every processed candidate lands in exactly one bucket, so
    ``imported + skipped + errors == total`` and ``len(duplicates) == skipped``.
    """

    total: int = 0
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    duplicates: List[str] = Field(default_factory=list)

    def record_imported(self) -> None:
        self.imported += 1

    def record_skipped(self, phone_number: str) -> None:
        self.skipped += 1
        self.duplicates.append(phone_number)

    def record_error(self, count: int = 1) -> None:
        self.errors += count
