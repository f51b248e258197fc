"""
Shared pydantic base classes for request and response schemas
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class RequestModel(CamelModel):
    """Base for request bodies: trims strings and rejects unknown keys"""

    class Config:
        str_strip_whitespace = True
        extra = "forbid"


class MessageResponse(BaseModel):
    """Plain acknowledgement body"""
    message: str
