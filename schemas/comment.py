from typing import Annotated, Any, Optional

import email_validator
from email_validator import EmailNotValidError, validate_email
from pydantic import (AfterValidator, BaseModel, ConfigDict, StrictInt,
                      field_validator)
from pydantic_core import PydanticCustomError

from core.iri import item_iri

from .groups import fields_in_group

READ_GROUP = "comment:read"
WRITE_GROUP = "comment:write"

# Which fields are serialized (read) and accepted from clients (write).
# created_at belongs to neither: it is never exposed or written through the API.
COMMENT_FIELD_GROUPS: dict[str, frozenset[str]] = {
    "id": frozenset({READ_GROUP}),
    "author": frozenset({READ_GROUP, WRITE_GROUP}),
    "text": frozenset({READ_GROUP, WRITE_GROUP}),
    "email": frozenset({READ_GROUP, WRITE_GROUP}),
    "note": frozenset({READ_GROUP, WRITE_GROUP}),
    "conference": frozenset({READ_GROUP, WRITE_GROUP}),
    "shorttext": frozenset({READ_GROUP}),
    "age": frozenset({READ_GROUP}),
    "created_at": frozenset(),
}

COMMENT_READ_FIELDS = fields_in_group(COMMENT_FIELD_GROUPS, READ_GROUP)
COMMENT_WRITE_FIELDS = fields_in_group(COMMENT_FIELD_GROUPS, WRITE_GROUP)

AUTHOR_MIN_LENGTH = 5
AUTHOR_MAX_LENGTH = 50
NOTE_MIN = 1
NOTE_MAX = 5

NOT_BLANK_MESSAGE = "This value should not be blank."
AUTHOR_MIN_MESSAGE = f"L'auteur doit contenir au moins {AUTHOR_MIN_LENGTH} caractères"
AUTHOR_MAX_MESSAGE = f"L'auteur doit contenir au plus {AUTHOR_MAX_LENGTH} caractères"
INVALID_EMAIL_MESSAGE = "This value is not a valid email address."
NOTE_RANGE_MESSAGE = f"You must be between {NOTE_MIN} and {NOTE_MAX} to enter"

# Reserved names such as .local or .test are still syntactically valid domains
email_validator.SPECIAL_USE_DOMAIN_NAMES.clear()


# --- Field validators ---


def validate_author(value: str) -> str:
    if value == "":
        raise PydanticCustomError("not_blank", NOT_BLANK_MESSAGE)
    if len(value) < AUTHOR_MIN_LENGTH:
        raise PydanticCustomError("author_too_short", AUTHOR_MIN_MESSAGE)
    if len(value) > AUTHOR_MAX_LENGTH:
        raise PydanticCustomError("author_too_long", AUTHOR_MAX_MESSAGE)
    return value


def validate_email_address(value: str) -> str:
    """Syntax check only; the address is stored exactly as submitted."""
    if value == "":
        raise PydanticCustomError("not_blank", NOT_BLANK_MESSAGE)
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("invalid_email", INVALID_EMAIL_MESSAGE)
    return value


def validate_note(value: Optional[int]) -> Optional[int]:
    if value is not None and not NOTE_MIN <= value <= NOTE_MAX:
        raise PydanticCustomError("note_out_of_range", NOTE_RANGE_MESSAGE)
    return value


Author = Annotated[str, AfterValidator(validate_author)]
Email = Annotated[str, AfterValidator(validate_email_address)]
Note = Annotated[Optional[StrictInt], AfterValidator(validate_note)]


# --- Schemas ---


class CommentWrite(BaseModel):
    """Schema for creating or replacing a comment (comment:write group)"""

    author: Author
    text: str
    email: Email
    note: Note = None
    conference: Optional[str] = None


class CommentPatch(BaseModel):
    """Schema for partial updates; only the fields sent are applied"""

    author: Author = None  # type: ignore[assignment]
    text: str = None  # type: ignore[assignment]
    email: Email = None  # type: ignore[assignment]
    note: Note = None
    conference: Optional[str] = None


class CommentRead(BaseModel):
    """Schema for comment responses (comment:read group)"""

    id: int
    author: str
    text: str
    email: str
    note: Optional[int] = None
    conference: Optional[str] = None
    shorttext: str
    age: str

    model_config = ConfigDict(from_attributes=True)

    @field_validator("conference", mode="before")
    @classmethod
    def conference_as_iri(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return item_iri("conference", value.id)
