from typing import List, Tuple

from loguru import logger

from app.Domains.CRM.Models.import_result import IntakeCandidate

REQUIRED_FIELDS = ("name", "phoneNumber")


def is_valid(candidate: IntakeCandidate) -> bool:
    return all(candidate.get(field) for field in REQUIRED_FIELDS)


def split_valid(
    candidates: List[IntakeCandidate],
) -> Tuple[List[IntakeCandidate], List[IntakeCandidate]]:
    """Partition candidates into (valid, invalid), preserving order."""
    valid, invalid = [], []
    for candidate in candidates:
        (valid if is_valid(candidate) else invalid).append(candidate)

    logger.info(f"Intake validation: {len(valid)} valid, {len(invalid)} invalid")
    return valid, invalid


def filter_valid(candidates: List[IntakeCandidate]) -> List[IntakeCandidate]:
    return split_valid(candidates)[0]
