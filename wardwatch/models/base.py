"""
Pydantic base models for request/response validation.

DESIGN PRINCIPLE:
- Models should reflect data structure, not business logic
- Wire format is camelCase; Python attributes and stored fields are snake_case
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every API model.
    Accepts both camelCase (wire) and snake_case (store documents) on input and
    serializes with camelCase aliases.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
