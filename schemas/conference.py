import re
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic_core import PydanticCustomError

from .groups import fields_in_group

READ_GROUP = "conference:read"
WRITE_GROUP = "conference:write"

CONFERENCE_FIELD_GROUPS: dict[str, frozenset[str]] = {
    "id": frozenset({READ_GROUP}),
    "city": frozenset({READ_GROUP, WRITE_GROUP}),
    "year": frozenset({READ_GROUP, WRITE_GROUP}),
    "is_international": frozenset({READ_GROUP, WRITE_GROUP}),
}

CONFERENCE_READ_FIELDS = fields_in_group(CONFERENCE_FIELD_GROUPS, READ_GROUP)

NOT_BLANK_MESSAGE = "This value should not be blank."
INVALID_YEAR_MESSAGE = "The year must be made of 4 digits"


def validate_city(value: str) -> str:
    if value.strip() == "":
        raise PydanticCustomError("not_blank", NOT_BLANK_MESSAGE)
    return value


def validate_year(value: str) -> str:
    if not re.fullmatch(r"\d{4}", value):
        raise PydanticCustomError("invalid_year", INVALID_YEAR_MESSAGE)
    return value


City = Annotated[str, AfterValidator(validate_city)]
Year = Annotated[str, AfterValidator(validate_year)]


class ConferenceWrite(BaseModel):
    """Schema for creating or replacing a conference"""

    city: City
    year: Year
    is_international: bool = False

    # Clean up leading/trailing whitespace
    model_config = ConfigDict(str_strip_whitespace=True)


class ConferencePatch(BaseModel):
    city: City = None  # type: ignore[assignment]
    year: Year = None  # type: ignore[assignment]
    is_international: bool = None  # type: ignore[assignment]

    model_config = ConfigDict(str_strip_whitespace=True)


class ConferenceRead(BaseModel):
    """Schema for conference responses"""

    id: int
    city: str
    year: str
    is_international: bool

    model_config = ConfigDict(from_attributes=True)
