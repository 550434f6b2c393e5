"""
Turn stored problem documents into API responses with people resolved.
"""

from typing import Dict, List

from wardwatch.services.user_service import UserService


async def with_people(problems: List[Dict], users: UserService) -> List[Dict]:
    """
    Replace reported_by / assigned_to ids with {id, name, email} summaries.
    A reference to a user that no longer exists becomes {id} only.
    """
    ids = [p.get("reported_by") for p in problems] + [p.get("assigned_to") for p in problems]
    summaries = await users.get_summaries(ids)

    def _resolve(user_id):
        if not user_id:
            return None
        return summaries.get(user_id, {"id": user_id})

    return [
        {**problem, "reported_by": _resolve(problem.get("reported_by")), "assigned_to": _resolve(problem.get("assigned_to"))}
        for problem in problems
    ]


async def present_problem(problem: Dict, users: UserService) -> Dict:
    return (await with_people([problem], users))[0]
