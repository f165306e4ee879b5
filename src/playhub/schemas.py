"""Shared pydantic base models.

The mobile client speaks camelCase JSON; Python code uses snake_case field
names. Requests accept either spelling, responses are emitted in camelCase.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Response model base: camelCase on the wire, built from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(BaseModel):
    """Request body base: camelCase or snake_case accepted, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class MessageResponse(ApiModel):
    message: str
