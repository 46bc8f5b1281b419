"""
=============================================================================
USER HANDLERS
=============================================================================

The five CRUD handlers. Each one performs at most one store operation.

    ┌──────────────────────┬───────────────────────────────────────────────┐
    │ Route                │ Outcomes (status / body)                      │
    ├──────────────────────┼───────────────────────────────────────────────┤
    │ POST   /users        │ 200 User created                              │
    │                      │ 500 Invalid JSON | 500 Internal error         │
    │ GET    /users/:id    │ 200 <user json>                               │
    │                      │ 404 Invalid ID | 404 User not found | 500     │
    │ GET    /users        │ 200 <array json> | 500 Internal error         │
    │ PUT    /users/:id    │ 200 User updated                              │
    │                      │ 404 Invalid ID | 500 Invalid JSON             │
    │                      │ 404 User not found | 500 Internal error       │
    │ DELETE /users/:id    │ 200 User deleted                              │
    │                      │ 404 Invalid ID | 404 User not found | 500     │
    └──────────────────────┴───────────────────────────────────────────────┘

A bad payload is answered with 500 and a bad id with 404. Both mappings
are kept as the public contract of the service.

=============================================================================
"""

import logging

from ..db.gateway import DatabaseError, UserGateway
from ..http.request import InvalidIdError, RawRequest
from ..http.response import Response, internal_error, not_found, ok
from ..http.router import Router
from ..models.user import UserDecodeError, decode_user, encode_user, encode_users


logger = logging.getLogger(__name__)

INVALID_ID = "Invalid ID"
INVALID_JSON = "Invalid JSON"
USER_NOT_FOUND = "User not found"


class UserHandlers:
    """
    CRUD handlers bound to a gateway.

    Usage:
        handlers = UserHandlers(gateway)
        handlers.register(router)
    """

    def __init__(self, gateway: UserGateway):
        self.gateway = gateway

    def register(self, router: Router) -> Router:
        """Register all five routes, in priority order."""
        router.post("/users", name="create_user")(self.create)
        router.get("/users/:id", name="get_user")(self.read)
        router.get("/users", name="list_users")(self.list_all)
        router.put("/users/:id", name="update_user")(self.update)
        router.delete("/users/:id", name="delete_user")(self.delete)
        return router

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def create(self, request: RawRequest) -> Response:
        try:
            user = decode_user(request.body)
        except UserDecodeError as e:
            logger.debug(f"Rejected create payload: {e}")
            return internal_error(INVALID_JSON)

        try:
            self.gateway.insert(user.name, user.email)
        except DatabaseError:
            logger.exception("Create failed")
            return internal_error()

        return ok("User created")

    def read(self, request: RawRequest) -> Response:
        try:
            user_id = request.parse_id()
        except InvalidIdError:
            return not_found(INVALID_ID)

        try:
            user = self.gateway.get_by_id(user_id)
        except DatabaseError:
            logger.exception(f"Read of user {user_id} failed")
            return internal_error()

        if user is None:
            return not_found(USER_NOT_FOUND)
        return ok(encode_user(user))

    def list_all(self, request: RawRequest) -> Response:
        try:
            users = self.gateway.get_all()
        except DatabaseError:
            logger.exception("Listing users failed")
            return internal_error()
        return ok(encode_users(users))

    def update(self, request: RawRequest) -> Response:
        try:
            user_id = request.parse_id()
        except InvalidIdError:
            return not_found(INVALID_ID)

        try:
            user = decode_user(request.body)
        except UserDecodeError as e:
            logger.debug(f"Rejected update payload: {e}")
            return internal_error(INVALID_JSON)

        try:
            affected = self.gateway.update(user_id, user.name, user.email)
        except DatabaseError:
            logger.exception(f"Update of user {user_id} failed")
            return internal_error()

        if affected > 0:
            return ok("User updated")
        return not_found(USER_NOT_FOUND)

    def delete(self, request: RawRequest) -> Response:
        try:
            user_id = request.parse_id()
        except InvalidIdError:
            return not_found(INVALID_ID)

        try:
            affected = self.gateway.delete(user_id)
        except DatabaseError:
            logger.exception(f"Delete of user {user_id} failed")
            return internal_error()

        if affected > 0:
            return ok("User deleted")
        return not_found(USER_NOT_FOUND)
