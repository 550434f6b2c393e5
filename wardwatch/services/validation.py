"""
Document validation run before every write to the store.

Request bodies are already parsed by the pydantic input models, but the store
validates the full document that is about to be persisted (including merged
partial updates). Each validator returns every violation it finds so the
caller can report all bad fields at once.
"""

from typing import Any, Dict, List

from pydantic.alias_generators import to_camel

from wardwatch.core.errors import ValidationFailed
from wardwatch.models.problem import ProblemCategory, ProblemPriority, ProblemStatus
from wardwatch.models.ward import MAX_WARD_NUMBER, MIN_WARD_NUMBER

CATEGORIES = {c.value for c in ProblemCategory}
PRIORITIES = {p.value for p in ProblemPriority}
STATUSES = {s.value for s in ProblemStatus}


def _violation(field: str, message: str) -> Dict[str, str]:
    return {"field": to_camel(field), "message": message}


def _check_length(errors: List, doc: Dict, field: str, min_len: int = 0, max_len: int = None,
                  required: bool = True, label: str = None) -> None:
    label = label or field.replace("_", " ").capitalize()
    value = doc.get(field)
    if value is None:
        if required:
            errors.append(_violation(field, f"{label} is required"))
        return
    if not isinstance(value, str):
        errors.append(_violation(field, f"{label} must be text"))
        return
    length = len(value.strip())
    if length < min_len or (max_len is not None and length > max_len):
        if max_len is None:
            errors.append(_violation(field, f"{label} must be at least {min_len} characters"))
        elif min_len == 0:
            errors.append(_violation(field, f"{label} must be less than {max_len} characters"))
        else:
            errors.append(_violation(field, f"{label} must be between {min_len} and {max_len} characters"))


def _is_ward_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and MIN_WARD_NUMBER <= value <= MAX_WARD_NUMBER


def validate_problem(doc: Dict[str, Any]) -> List[Dict[str, str]]:
    """Return every constraint the problem document violates."""
    errors: List[Dict[str, str]] = []

    _check_length(errors, doc, "title", 5, 200)
    _check_length(errors, doc, "description", 10, 1000)
    _check_length(errors, doc, "location", 5)
    _check_length(errors, doc, "admin_notes", 0, 500, required=False, label="Admin notes")

    if doc.get("category") not in CATEGORIES:
        errors.append(_violation("category", "Invalid category"))
    if doc.get("priority") not in PRIORITIES:
        errors.append(_violation("priority", "Invalid priority"))
    if doc.get("status") not in STATUSES:
        errors.append(_violation("status", "Invalid status"))
    if not _is_ward_number(doc.get("ward_number")):
        errors.append(_violation("ward_number", f"Ward number must be between {MIN_WARD_NUMBER} and {MAX_WARD_NUMBER}"))
    if not doc.get("reported_by"):
        errors.append(_violation("reported_by", "Reporter is required"))

    images = doc.get("images", [])
    if not isinstance(images, list) or not all(isinstance(url, str) for url in images):
        errors.append(_violation("images", "Images must be a list of URLs"))

    return errors


def validate_ward(doc: Dict[str, Any]) -> List[Dict[str, str]]:
    """Return every constraint the ward document violates."""
    errors: List[Dict[str, str]] = []

    if not _is_ward_number(doc.get("ward_number")):
        errors.append(_violation("ward_number", f"Ward number must be between {MIN_WARD_NUMBER} and {MAX_WARD_NUMBER}"))

    _check_length(errors, doc, "name", 2, label="Ward name")
    _check_length(errors, doc, "description", 0, 500, required=False)

    population = doc.get("population", 0)
    if not isinstance(population, int) or isinstance(population, bool) or population < 0:
        errors.append(_violation("population", "Population must be a positive number"))

    representative = doc.get("representative")
    if representative is not None and not isinstance(representative, dict):
        errors.append(_violation("representative", "Representative must have a name and contact"))

    return errors


def ensure_valid(errors: List[Dict[str, str]]) -> None:
    if errors:
        raise ValidationFailed(errors)
