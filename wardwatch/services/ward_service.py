"""
Ward service - store façade for municipal wards.

Wards are keyed by their ward number (document id = str(ward_number)), which
makes the uniqueness check and the insert a single atomic create().
Inactive wards are soft-deleted: they stay in the collection but are hidden
from every listing and detail read.

Problem counts are never stored on the ward. They are computed from the
problems collection each time a ward is read.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from google.api_core.exceptions import AlreadyExists

from wardwatch.config.firebase import get_db
from wardwatch.core.errors import Conflict, NotFound
from wardwatch.services.problem_service import ProblemService
from wardwatch.services.validation import ensure_valid, validate_ward
from wardwatch.utils.firestore_helpers import (
    ASCENDING,
    run_blocking,
    snapshot_to_dict,
    utcnow,
    where_filter,
)

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = ("name", "description", "population", "area", "representative", "is_active")


class WardService:

    COLLECTION = "wards"

    def __init__(self, db=None, problems: Optional[ProblemService] = None):
        self.db = db if db is not None else get_db()
        self.problems = problems or ProblemService(self.db)

    @property
    def collection(self):
        return self.db.collection(self.COLLECTION)

    def _ref(self, ward_number: int):
        return self.collection.document(str(ward_number))

    async def create_ward(self, fields: Dict[str, Any]) -> Dict:
        """
        Create a ward. Raises Conflict when the ward number is already taken;
        the existing record is left untouched.
        """
        now = utcnow()
        doc = {
            "ward_number": fields.get("ward_number"),
            "name": fields.get("name"),
            "description": fields.get("description"),
            "population": fields.get("population") or 0,
            "area": fields.get("area"),
            "representative": fields.get("representative") or {"name": None, "contact": None},
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        ensure_valid(validate_ward(doc))
        return await run_blocking(self._create, doc)

    def _create(self, doc: Dict) -> Dict:
        doc_ref = self._ref(doc["ward_number"])
        try:
            doc_ref.create(doc)
        except AlreadyExists:
            logger.warning(f"Ward {doc['ward_number']} already exists, refusing to create")
            raise Conflict("Ward with this number already exists")
        logger.info(f"Ward created: {doc['ward_number']} ({doc['name']})")
        return snapshot_to_dict(doc_ref.get())

    async def update_ward(self, ward_number: int, patch: Dict[str, Any]) -> Dict:
        """Apply a partial patch. The merged document is re-validated before it is written."""
        changes = {key: value for key, value in patch.items() if key in PATCHABLE_FIELDS}
        return await run_blocking(self._update, ward_number, changes)

    def _update(self, ward_number: int, changes: Dict[str, Any]) -> Dict:
        doc_ref = self._ref(ward_number)
        current = snapshot_to_dict(doc_ref.get())
        if current is None:
            raise NotFound("Ward not found")

        changes = {**changes, "updated_at": utcnow()}
        ensure_valid(validate_ward({**current, **changes}))
        doc_ref.update(changes)
        logger.info(f"Ward {ward_number} updated: {sorted(changes)}")
        return snapshot_to_dict(doc_ref.get())

    async def deactivate_ward(self, ward_number: int) -> Dict:
        ward = await self.get_ward(ward_number, with_counts=False)
        updated = await run_blocking(self._update, ward["ward_number"], {"is_active": False})
        logger.info(f"Ward {ward_number} deactivated")
        return updated

    async def get_ward(self, ward_number: int, with_counts: bool = True) -> Dict:
        ward = await run_blocking(lambda: snapshot_to_dict(self._ref(ward_number).get()))
        if ward is None or not ward.get("is_active", True):
            raise NotFound("Ward not found")
        if with_counts:
            ward = await self._attach_counts(ward)
        return ward

    async def list_wards(self) -> List[Dict]:
        """Active wards in ward-number order, each with its live problem counts."""
        def _active():
            query = where_filter(self.collection, "is_active", "==", True)
            return [snapshot_to_dict(doc) for doc in query.order_by("ward_number", direction=ASCENDING).stream()]

        wards = await run_blocking(_active)
        return list(await asyncio.gather(*(self._attach_counts(ward) for ward in wards)))

    async def has_any_ward(self) -> bool:
        """True if the collection holds at least one ward, active or not."""
        def _probe():
            return any(True for _ in self.collection.limit(1).stream())

        return await run_blocking(_probe)

    async def insert_many(self, docs: List[Dict]) -> None:
        """Bulk insert already-built ward documents (bootstrap only)."""
        for doc in docs:
            ensure_valid(validate_ward(doc))

        def _insert_all():
            for doc in docs:
                self._ref(doc["ward_number"]).set(doc)

        await run_blocking(_insert_all)

    async def _attach_counts(self, ward: Dict) -> Dict:
        active, total = await asyncio.gather(
            self.problems.count_for_ward(ward["ward_number"], active_only=True),
            self.problems.count_for_ward(ward["ward_number"]),
        )
        return {**ward, "active_problems": active, "total_problems": total}


def get_ward_service() -> WardService:
    return WardService()
