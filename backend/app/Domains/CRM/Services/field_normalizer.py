"""
Maps heterogeneous source records onto the canonical intake candidate shape.

Each source gets a declarative table ``{canonical_field: [accepted keys]}``
resolved by :func:`first_present`; keys are tried in order and the first
non-empty value wins.
"""

from typing import Any, Dict, Iterable, List, Sequence

from app.Core.Exceptions.errors import InvalidImportDataError, InvalidImportSourceError
from app.Domains.CRM.Models.import_result import IMPORT_SOURCES, IntakeCandidate

# Leads written by older crawler versions carry misspelled keys
CRAWL_FIELD_MAP: Dict[str, List[str]] = {
    "name": ["name"],
    "phoneNumber": ["phoneNumber", "phoneNNumber"],
    "email": ["email"],
    "instagram": ["instagram"],
    "address": ["address", "adress"],
    "description": ["description"],
    "country": ["country"],
    "category": ["category"],
}

CRAWL_DEFAULTS: Dict[str, Any] = {"country": "Unknown", "category": "other"}

EXCEL_FIELD_MAP: Dict[str, List[str]] = {
    "name": ["name", "Name"],
    "phoneNumber": ["phoneNumber", "phone", "Phone", "PhoneNumber"],
    "email": ["email", "Email"],
    "instagram": ["instagram", "Instagram"],
    "address": ["address", "Address"],
    "description": ["description", "Description"],
    "country": ["country", "Country"],
    "category": ["category", "Category"],
}

EXCEL_DEFAULTS: Dict[str, Any] = {"category": "other"}

TEXT_FIELDS = tuple(CRAWL_FIELD_MAP)


def _is_empty(value: Any, strip: bool = True) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return (value.strip() if strip else value) == ""
    return False


def first_present(
    record: Dict[str, Any], keys: Sequence[str], default: Any = None, strip: bool = True
) -> Any:
    """Return the first non-empty value of ``keys`` in ``record``, else ``default``.

    With ``strip=False`` a whitespace-only string counts as present.
    """
    for key in keys:
        value = record.get(key)
        if not _is_empty(value, strip):
            return value
    return default


def _as_text(value: Any) -> str:
    # Spreadsheet cells often come back as numbers (phone 5550100, 5550100.0)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _number_as_text(value: Any) -> Any:
    """Turn a numeric scalar into text; anything else passes through untouched."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _as_text(value)
    return value


def _fresh_candidate(source: str) -> IntakeCandidate:
    return {"source": source, "status": "new", "notes": [], "contactHistory": []}


def normalize_crawl(leads: Iterable[Dict[str, Any]]) -> List[IntakeCandidate]:
    candidates = []
    for lead in leads:
        candidate = {
            field: _number_as_text(
                first_present(lead, keys, CRAWL_DEFAULTS.get(field), strip=False)
            )
            for field, keys in CRAWL_FIELD_MAP.items()
        }
        candidate.update(_fresh_candidate("crawl"))
        candidates.append(candidate)
    return candidates


def normalize_excel(rows: Iterable[Dict[str, Any]]) -> List[IntakeCandidate]:
    candidates = []
    for row in rows:
        if not isinstance(row, dict):
            raise InvalidImportDataError("Each spreadsheet row must be an object")
        candidate = {
            field: _as_text(first_present(row, keys, EXCEL_DEFAULTS.get(field, "")))
            for field, keys in EXCEL_FIELD_MAP.items()
        }
        candidate.update(_fresh_candidate("excel"))
        candidates.append(candidate)
    return candidates


def normalize_manual(data: Any) -> List[IntakeCandidate]:
    items = data if isinstance(data, list) else [data]
    candidates = []
    for item in items:
        if not isinstance(item, dict):
            raise InvalidImportDataError("Each manual entry must be an object")
        text_fields = {
            field: _number_as_text(item[field]) for field in TEXT_FIELDS if field in item
        }
        candidates.append(
            {
                **item,
                **text_fields,
                "source": "manual",
                "status": item.get("status") or "new",
                "notes": item.get("notes") or [],
                "contactHistory": item.get("contactHistory") or [],
            }
        )
    return candidates


def ensure_source(source: Any) -> str:
    if source not in IMPORT_SOURCES:
        raise InvalidImportSourceError()
    return source


def normalize(
    source: str, data: Any = None, leads: Iterable[Dict[str, Any]] = ()
) -> List[IntakeCandidate]:
    """Dispatch to the per-source normalizer.

    ``leads`` feeds the crawl path, ``data`` the excel and manual paths.
    """
    ensure_source(source)

    if source == "crawl":
        return normalize_crawl(leads)

    if data is None:
        raise InvalidImportDataError(f"Import data is required for source '{source}'")

    if source == "excel":
        if not isinstance(data, list):
            raise InvalidImportDataError("Excel import data must be a list of rows")
        return normalize_excel(data)

    return normalize_manual(data)
