"""
Problem service - store façade for reported civic problems.
Handles Firestore CRUD, filtered listing and aggregate counts.

DESIGN NOTE:
- Every write validates the full document first (validate_problem)
- ward_number and reported_by are written once at creation and never updated
- Status changes are single-document updates: concurrent updates to the same
  problem are last-write-wins, there is no application-level locking
- No status state machine: any status may follow any other
"""

import logging
import math
from collections import Counter, defaultdict
from typing import Any, Dict, List, Optional

from wardwatch.config.firebase import get_db
from wardwatch.core.errors import NotFound
from wardwatch.models.problem import (
    ACTIVE_STATUSES,
    RESOLVED_STATUSES,
    ProblemPriority,
    ProblemStatus,
)
from wardwatch.services.validation import ensure_valid, validate_problem
from wardwatch.utils.firestore_helpers import (
    DESCENDING,
    count_documents,
    run_blocking,
    snapshot_to_dict,
    utcnow,
    where_filter,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

_STATUS_ORDER = [s.value for s in ProblemStatus]


class ProblemService:
    """
    Store façade for the problems collection.

    Public methods are coroutines; the blocking Firestore calls run in the
    default executor via run_blocking.
    """

    COLLECTION = "problems"

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    @property
    def collection(self):
        return self.db.collection(self.COLLECTION)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_problem(self, fields: Dict[str, Any], reported_by: str, ward_number: int) -> Dict:
        """
        Create a problem reported by `reported_by` in `ward_number`.

        Any ward_number or reported_by present in `fields` is ignored: both
        come from the authenticated reporter.
        """
        now = utcnow()
        doc = {
            "title": fields.get("title"),
            "description": fields.get("description"),
            "category": fields.get("category"),
            "location": fields.get("location"),
            "priority": fields.get("priority") or ProblemPriority.MEDIUM.value,
            "status": ProblemStatus.OPEN.value,
            "reported_by": reported_by,
            "ward_number": ward_number,
            "assigned_to": None,
            "admin_notes": None,
            "images": list(fields.get("images") or []),
            "resolved_at": None,
            "estimated_resolution_date": None,
            "is_public": True,
            "created_at": now,
            "updated_at": now,
        }
        ensure_valid(validate_problem(doc))

        return await run_blocking(self._insert, doc)

    def _insert(self, doc: Dict) -> Dict:
        doc_ref = self.collection.document()
        try:
            doc_ref.set(doc)
        except Exception as e:
            logger.error(f"Failed to save problem to Firestore: {e}", exc_info=True)
            raise
        logger.info(f"Problem saved: {doc_ref.id} (ward {doc['ward_number']})")
        return snapshot_to_dict(doc_ref.get())

    async def update_status(self, problem_id: str, new_status: str, admin_notes: Optional[str] = None) -> Dict:
        """
        Set the status (and optionally admin notes) of a problem.

        Entering Resolved or Closed stamps resolved_at with the current time.
        Any other status leaves resolved_at exactly as it was.
        """
        return await run_blocking(self._update_status, problem_id, new_status, admin_notes)

    def _update_status(self, problem_id: str, new_status: str, admin_notes: Optional[str]) -> Dict:
        doc_ref = self.collection.document(problem_id)
        current = snapshot_to_dict(doc_ref.get())
        if current is None:
            raise NotFound("Problem not found")

        now = utcnow()
        changes: Dict[str, Any] = {"status": new_status, "updated_at": now}
        if admin_notes:
            changes["admin_notes"] = admin_notes
        if new_status in RESOLVED_STATUSES:
            changes["resolved_at"] = now

        ensure_valid(validate_problem({**current, **changes}))
        doc_ref.update(changes)
        logger.info(f"Problem {problem_id} status: {current.get('status')} -> {new_status}")
        return snapshot_to_dict(doc_ref.get())

    async def assign(self, problem_id: str, assignee_id: str) -> Dict:
        return await run_blocking(self._assign, problem_id, assignee_id)

    def _assign(self, problem_id: str, assignee_id: str) -> Dict:
        doc_ref = self.collection.document(problem_id)
        current = snapshot_to_dict(doc_ref.get())
        if current is None:
            raise NotFound("Problem not found")

        changes = {"assigned_to": assignee_id, "updated_at": utcnow()}
        ensure_valid(validate_problem({**current, **changes}))
        doc_ref.update(changes)
        logger.info(f"Problem {problem_id} assigned to {assignee_id}")
        return snapshot_to_dict(doc_ref.get())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_problem(self, problem_id: str) -> Dict:
        problem = await run_blocking(self._get, problem_id)
        if problem is None:
            raise NotFound("Problem not found")
        return problem

    def _get(self, problem_id: str) -> Optional[Dict]:
        return snapshot_to_dict(self.collection.document(problem_id).get())

    def _filtered_query(self, ward_number: Optional[int] = None, status: Optional[str] = None,
                        category: Optional[str] = None):
        query = self.collection
        if ward_number is not None:
            query = where_filter(query, "ward_number", "==", ward_number)
        if status:
            query = where_filter(query, "status", "==", status)
        if category:
            query = where_filter(query, "category", "==", category)
        return query

    async def list_problems(
        self,
        ward_number: Optional[int] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> Dict:
        """
        Newest-first page of problems matching the filter.

        Returns {"problems", "total", "total_pages", "current_page"}.
        """
        page = max(page or DEFAULT_PAGE, 1)
        page_size = max(page_size or DEFAULT_PAGE_SIZE, 1)
        return await run_blocking(self._list, ward_number, status, category, page, page_size)

    def _list(self, ward_number, status, category, page: int, page_size: int) -> Dict:
        base = self._filtered_query(ward_number, status, category)
        skip = (page - 1) * page_size

        page_query = base.order_by("created_at", direction=DESCENDING).offset(skip).limit(page_size)
        problems = [snapshot_to_dict(doc) for doc in page_query.stream()]
        total = count_documents(base)

        return {
            "problems": problems,
            "total": total,
            "total_pages": math.ceil(total / page_size),
            "current_page": page,
        }

    async def recent_problems(self, ward_number: int, limit: int = 5) -> List[Dict]:
        def _recent():
            query = where_filter(self.collection, "ward_number", "==", ward_number)
            query = query.order_by("created_at", direction=DESCENDING).limit(limit)
            return [snapshot_to_dict(doc) for doc in query.stream()]

        return await run_blocking(_recent)

    async def count_for_ward(self, ward_number: int, active_only: bool = False) -> int:
        def _count():
            query = where_filter(self.collection, "ward_number", "==", ward_number)
            if active_only:
                query = where_filter(query, "status", "in", ACTIVE_STATUSES)
            return count_documents(query)

        return await run_blocking(_count)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def status_counts(self, ward_number: Optional[int] = None) -> List[Dict]:
        docs = await run_blocking(self._stream_for_stats, ward_number)
        return _status_stats(docs)

    async def stats_summary(self, ward_number: Optional[int] = None) -> Dict:
        """
        Three aggregates over the (optionally ward-filtered) problems:
        counts by status, counts by category (most frequent first) and
        per-ward breakdowns (ascending ward number).
        """
        docs = await run_blocking(self._stream_for_stats, ward_number)
        return {
            "status_stats": _status_stats(docs),
            "category_stats": _category_stats(docs),
            "ward_stats": _ward_stats(docs),
        }

    def _stream_for_stats(self, ward_number: Optional[int]) -> List[Dict]:
        query = self._filtered_query(ward_number=ward_number)
        return [doc.to_dict() or {} for doc in query.stream()]


def _status_stats(docs: List[Dict]) -> List[Dict]:
    counts = Counter(doc.get("status") for doc in docs)
    ordered = sorted(counts, key=lambda s: _STATUS_ORDER.index(s) if s in _STATUS_ORDER else len(_STATUS_ORDER))
    return [{"_id": status, "count": counts[status]} for status in ordered]


def _category_stats(docs: List[Dict]) -> List[Dict]:
    counts = Counter(doc.get("category") for doc in docs)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], str(item[0])))
    return [{"_id": category, "count": count} for category, count in ordered]


def _ward_stats(docs: List[Dict]) -> List[Dict]:
    wards: Dict[int, Dict[str, int]] = defaultdict(lambda: {"count": 0, "open": 0, "in_progress": 0, "resolved": 0})
    for doc in docs:
        entry = wards[doc.get("ward_number")]
        entry["count"] += 1
        status = doc.get("status")
        if status == ProblemStatus.OPEN.value:
            entry["open"] += 1
        elif status == ProblemStatus.IN_PROGRESS.value:
            entry["in_progress"] += 1
        elif status == ProblemStatus.RESOLVED.value:
            entry["resolved"] += 1
    return [{"_id": ward, **wards[ward]} for ward in sorted(wards)]


def get_problem_service() -> ProblemService:
    """FastAPI dependency: a ProblemService bound to the current store client."""
    return ProblemService()
