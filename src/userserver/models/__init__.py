"""
Domain models.

    User             - The sole entity (pydantic model)
    decode_user      - JSON → User
    encode_user      - User → JSON
    encode_users     - [User] → JSON array
    UserDecodeError  - Payload is not a valid User
"""

from .user import User, UserDecodeError, decode_user, encode_user, encode_users

__all__ = ["User", "UserDecodeError", "decode_user", "encode_user", "encode_users"]
