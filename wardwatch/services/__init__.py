"""
Services layer - business logic and store access.
One service per collection (problems, wards, users), plus the access policy,
the notification bus and startup bootstrap.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Services raise domain errors from wardwatch.core.errors, never HTTP responses
- Every store write is validated first (see validation.py)
"""
