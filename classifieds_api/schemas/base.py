"""
Shared Pydantic base classes.
Public JSON uses camelCase keys while python code keeps snake_case names.
"""

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exposing camelCase aliases and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartialModel(CamelModel):
    """
    Base for update payloads: every field is optional, but a field that is
    sent must carry a value.
    """

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field may not be null")
        return v
