"""
Ward-scoped access policy.

Pure predicates over the authenticated actor. Nothing here raises: handlers
decide how a False answer surfaces.

Two policies coexist on purpose and must stay that way:
- single-resource reads fail closed (AccessDenied when can_view is False);
- listings never fail, they are narrowed to the actor's own ward
  (scope_ward_filter).
"""

from typing import Optional

from wardwatch.models.user import Actor


def can_view(actor: Actor, ward_number: int) -> bool:
    """Admins see every ward; residents only their own."""
    if actor.is_admin:
        return True
    return ward_number == actor.ward_number


def can_mutate_status(actor: Actor) -> bool:
    return actor.is_admin


def can_manage_wards(actor: Actor) -> bool:
    return actor.is_admin


def scope_ward_filter(actor: Actor, requested_ward: Optional[int]) -> Optional[int]:
    """
    Ward filter to apply to a listing query.

    Residents are pinned to their own ward whatever they asked for. Admins get
    exactly what they requested (None means all wards).
    """
    if actor.is_admin:
        return requested_ward
    return actor.ward_number
