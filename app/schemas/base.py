"""
app/schemas/base.py

Shared pydantic base for API payloads.

The dashboard client speaks camelCase; Python code uses snake_case field
names and serializes by alias.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
