"""
Request handlers.

    UserHandlers - CRUD on /users
"""

from .users import UserHandlers

__all__ = ["UserHandlers"]
