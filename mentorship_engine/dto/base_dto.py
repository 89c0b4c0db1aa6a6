from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# JSON bodies are camelCase; Python code keeps snake_case field names.
_CAMEL_CASE = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BaseDto(BaseModel):
    """Response DTO, validated straight from ORM entities."""

    model_config = ConfigDict(**_CAMEL_CASE, from_attributes=True)


class BaseRequestDto(BaseModel):
    """
    Request body DTO.

    Unknown fields are rejected so a typo in a camelCase key fails loudly
    instead of silently falling back to a default.
    """

    model_config = ConfigDict(
        **_CAMEL_CASE,
        extra="forbid",
        str_strip_whitespace=True,
        validate_assignment=True,
    )
