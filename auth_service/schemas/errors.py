"""Pydantic schemas for the uniform error response body."""

from pydantic import BaseModel, Field


class ErrorItem(BaseModel):
    """One entry of the {"errors": [...]} array."""

    type: str = Field(description="Error type name (e.g. BadRequestError, field)")
    msg: str = Field(description="Human-readable message; never includes internals")
    path: str = Field(default="", description="Offending request field, if any")
    location: str = Field(default="", description="Where the field was read from (e.g. body)")


class FieldError(ErrorItem):
    """A single failed field constraint."""

    type: str = "field"
    location: str = "body"


class ErrorResponse(BaseModel):
    """Body returned for every 4xx/5xx response."""

    errors: list[ErrorItem]
