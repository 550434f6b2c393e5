"""
User Service - Manage users (residents and admins) in Firestore.
"""

import logging
from typing import Dict, Iterable, Optional

from wardwatch.config.firebase import get_db
from wardwatch.core.errors import Conflict
from wardwatch.models.user import UserRole
from wardwatch.utils.firestore_helpers import run_blocking, snapshot_to_dict, utcnow, where_filter
from wardwatch.utils.security import hash_password

logger = logging.getLogger(__name__)


class UserService:
    """
    Service for user management in Firestore.
    """

    COLLECTION = "users"

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    @property
    def collection(self):
        return self.db.collection(self.COLLECTION)

    async def get_user(self, user_id: str) -> Optional[Dict]:
        if not user_id:
            return None
        return await run_blocking(lambda: snapshot_to_dict(self.collection.document(user_id).get()))

    async def get_user_by_email(self, email: str) -> Optional[Dict]:
        """
        Get user by email.

        Args:
            email: Email address (case-insensitive)

        Returns:
            User dict or None if not found
        """
        def _lookup():
            query = where_filter(self.collection, "email", "==", _normalize_email(email)).limit(1)
            docs = list(query.stream())
            return snapshot_to_dict(docs[0]) if docs else None

        return await run_blocking(_lookup)

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        ward_number: int,
        role: UserRole = UserRole.RESIDENT,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Dict:
        """
        Create a new user with a hashed password.

        Raises:
            Conflict: a user with this email already exists
        """
        if await self.get_user_by_email(email):
            raise Conflict("User with this email already exists")

        user_data = {
            "name": name,
            "email": _normalize_email(email),
            "password_hash": hash_password(password),
            "role": role.value if isinstance(role, UserRole) else role,
            "ward_number": ward_number,
            "phone": phone,
            "address": address,
            "created_at": utcnow(),
        }

        def _insert():
            user_ref = self.collection.document()
            user_ref.set(user_data)
            return snapshot_to_dict(user_ref.get())

        user = await run_blocking(_insert)
        logger.info(f"User created: {user['id']} ({user['role']}, ward {ward_number})")
        return user

    async def admin_exists(self) -> bool:
        def _probe():
            query = where_filter(self.collection, "role", "==", UserRole.ADMIN.value).limit(1)
            return any(True for _ in query.stream())

        return await run_blocking(_probe)

    async def get_summaries(self, user_ids: Iterable[Optional[str]]) -> Dict[str, Dict]:
        """
        Resolve user ids to {id, name, email} summaries for display.
        Unknown ids are simply absent from the result.
        """
        wanted = sorted({uid for uid in user_ids if uid})

        def _fetch():
            summaries = {}
            for uid in wanted:
                user = snapshot_to_dict(self.collection.document(uid).get())
                if user:
                    summaries[uid] = {"id": uid, "name": user.get("name"), "email": user.get("email")}
            return summaries

        return await run_blocking(_fetch)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def public_user(user: Dict) -> Dict:
    """Strip secrets before a user document leaves the service layer."""
    return {key: value for key, value in user.items() if key != "password_hash"}


def get_user_service() -> UserService:
    return UserService()
