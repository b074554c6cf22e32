"""
Base Pydantic schemas.

Shared configuration and common fields for the API schemas.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    All other schemas inherit from this class so they can be built straight
    from ORM rows and dataclasses.
    """

    model_config = ConfigDict(from_attributes=True)


class IDSchema(BaseSchema):
    """
    Schema with ID field.
    """

    id: int
