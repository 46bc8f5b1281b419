"""
=============================================================================
USER RECORD MAPPER
=============================================================================

The User entity and its JSON representation.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        JSON ⇄ User                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Request body                          User                         │
    │   {"name":"Ann","email":"a@x.com"}  ──► User(id=None,                │
    │                                              name="Ann",             │
    │                                              email="a@x.com")        │
    │                                                                      │
    │   Row from the users table              Response body                │
    │   User(id=1, name="Ann", ...)       ──► {"id":1,"name":"Ann",...}    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Decoding is strict about SHAPE only: `name` and `email` must be JSON
strings, `id` (if present) must be a JSON integer that fits in a 32-bit
signed column. Content is not validated: empty strings and any email
format are accepted. A field given twice is rejected, not overwritten.

Encoding is compact (no whitespace) and keeps the field order
id, name, email:

    {"id":1,"name":"Ann","email":"a@x.com"}

=============================================================================
"""

import json
from typing import Annotated, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


# Bounds of a PostgreSQL INTEGER / SERIAL column
INT4_MIN = -(2 ** 31)
INT4_MAX = 2 ** 31 - 1

UserId = Annotated[int, Field(ge=INT4_MIN, le=INT4_MAX)]


class UserDecodeError(ValueError):
    """Raised when a payload is not a JSON object shaped like a User."""


class User(BaseModel):
    """
    A row of the `users` table.

    Attributes:
        id: Store-assigned primary key. None on creation input.
        name: Display name.
        email: Email address (uniqueness is not enforced).
    """

    model_config = ConfigDict(strict=True)

    id: Optional[UserId] = None
    name: str
    email: str


_USER_LIST = TypeAdapter(List[User])


def _repeated_fields(data: Union[bytes, str]) -> List[str]:
    """User fields that appear more than once at the top level of a JSON object."""
    pairs = json.loads(data, object_pairs_hook=list)
    keys = [key for key, _ in pairs if key in User.model_fields]
    return sorted({key for key in keys if keys.count(key) > 1})


def decode_user(data: Union[bytes, str]) -> User:
    """
    Parse a JSON object into a User.

    Args:
        data: Raw JSON text or bytes.

    Returns:
        The decoded User (id is None when the payload has none).

    Raises:
        UserDecodeError: Malformed JSON, missing, repeated or wrongly
            typed field.
    """
    try:
        user = User.model_validate_json(data)
    except ValidationError as e:
        raise UserDecodeError(f"Invalid user payload: {e.error_count()} error(s)") from e

    # pydantic keeps the last of repeated keys
    try:
        repeated = _repeated_fields(data)
    except ValueError as e:
        raise UserDecodeError(f"Invalid user payload: {e}") from e
    if repeated:
        raise UserDecodeError(f"Duplicate field(s): {', '.join(repeated)}")

    return user


def encode_user(user: User) -> str:
    """Serialize one User to compact JSON."""
    return user.model_dump_json()


def encode_users(users: Sequence[User]) -> str:
    """Serialize a sequence of Users to a compact JSON array."""
    return _USER_LIST.dump_json(list(users)).decode("utf-8")
