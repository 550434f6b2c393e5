"""
One-time default data for a fresh store.

initialize_default_data is called once from the application startup hook.
Both steps are guarded by existence checks, so running it against a store
that already has wards and an admin creates nothing.
"""

import logging
import random
from typing import Dict, List, Optional

from wardwatch.core.settings import settings
from wardwatch.models.user import UserRole
from wardwatch.services.user_service import UserService
from wardwatch.services.ward_service import WardService
from wardwatch.utils.firestore_helpers import utcnow

logger = logging.getLogger(__name__)


def build_default_wards(count: int, municipality: str, rng: Optional[random.Random] = None) -> List[Dict]:
    """Placeholder wards 1..count with randomized population, area and contact."""
    rng = rng or random.Random()
    now = utcnow()
    wards = []
    for i in range(1, count + 1):
        wards.append({
            "ward_number": i,
            "name": f"Ward {i}",
            "description": f"Area {i} of {municipality}",
            "population": rng.randint(500, 1499),
            "area": f"{rng.randint(2, 6)} sq km",
            "representative": {
                "name": f"Representative {i}",
                "contact": f"+91{rng.randint(1000000000, 9999999999)}",
            },
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        })
    return wards


async def initialize_default_data(db=None) -> Dict[str, int]:
    """
    Seed default wards and the admin account if they are missing.

    Returns how many wards and admins were created (both 0 on a populated store).
    """
    wards = WardService(db)
    users = UserService(wards.db)
    created = {"wards": 0, "admins": 0}

    if not await wards.has_any_ward():
        defaults = build_default_wards(settings.DEFAULT_WARD_COUNT, settings.MUNICIPALITY_NAME)
        await wards.insert_many(defaults)
        created["wards"] = len(defaults)
        logger.info(f"[BOOTSTRAP] Created {len(defaults)} default wards")
    else:
        logger.info("[BOOTSTRAP] Wards already present, skipping ward seed")

    if not await users.admin_exists():
        await users.create_user(
            name=settings.DEFAULT_ADMIN_NAME,
            email=settings.DEFAULT_ADMIN_EMAIL,
            password=settings.DEFAULT_ADMIN_PASSWORD,
            ward_number=settings.DEFAULT_ADMIN_WARD,
            role=UserRole.ADMIN,
            phone="9999999999",
            address="Administrative Office",
        )
        created["admins"] = 1
        logger.info(f"[BOOTSTRAP] Admin user created: {settings.DEFAULT_ADMIN_EMAIL}")
    else:
        logger.info("[BOOTSTRAP] Admin user already present, skipping admin seed")

    return created
