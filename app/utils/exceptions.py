"""
Typed failures raised by the hierarchy, permission and store layers,
plus the handlers that render them as stable JSON responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class TodoAppError(Exception):
    """Base class for every failure returned to API callers"""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidCredential(TodoAppError):
    code = "invalid_credential"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid login name or password"


class InsufficientRole(TodoAppError):
    code = "insufficient_role"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Insufficient permissions"


class ForbiddenRoleEscalation(TodoAppError):
    code = "forbidden_role_escalation"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Admins cannot grant the super_admin role"


class ForbiddenTarget(TodoAppError):
    code = "forbidden_target"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to act on this user"


class Forbidden(TodoAppError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action"


class SelfDeleteForbidden(TodoAppError):
    code = "self_delete_forbidden"
    default_detail = "You cannot delete your own account"


class HasSubordinates(TodoAppError):
    code = "has_subordinates"
    default_detail = "User still has subordinates, reassign or delete them first"


class CyclicHierarchy(TodoAppError):
    code = "cyclic_hierarchy"
    default_detail = "This manager assignment would create a cycle"


class AlreadyExists(TodoAppError):
    code = "already_exists"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This manager is already assigned"


class EdgeNotFound(TodoAppError):
    code = "edge_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Manager relationship not found"


class NotFound(TodoAppError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class AssigneeNotFound(TodoAppError):
    code = "assignee_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Assignee not found"


class EmptyText(TodoAppError):
    code = "empty_text"
    default_detail = "Todo text cannot be empty"


class PasswordTooShort(TodoAppError):
    code = "password_too_short"
    default_detail = "Password is too short"


class DuplicateHandle(TodoAppError):
    code = "duplicate_handle"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Username or login name already exists"


class StorageFailure(TodoAppError):
    code = "storage_failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal storage error"


async def _todo_app_error_handler(_request: Request, exc: TodoAppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": StorageFailure.default_detail, "code": StorageFailure.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the typed failure handlers to the FastAPI app."""
    app.add_exception_handler(TodoAppError, _todo_app_error_handler)
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)
