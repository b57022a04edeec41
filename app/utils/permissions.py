# app/utils/permissions.py
import logging
from typing import Optional, Set

from sqlalchemy.orm import Session

from app.models.todo import Todo
from app.models.user import User, UserRole
from app.utils.exceptions import (
    Forbidden,
    ForbiddenRoleEscalation,
    ForbiddenTarget,
    InsufficientRole,
)
from app.utils.hierarchy import HierarchyManager

logger = logging.getLogger(__name__)

ADMIN_ROLES = {UserRole.SUPER_ADMIN.value, UserRole.ADMIN.value}


class AccessControl:
    """Role based permissions and visibility scope for one acting user.

    - super_admin: sees every user, may act on anything
    - admin: sees self + all subordinates, acts within that scope,
      never on a super_admin
    - user: sees only self
    """

    def __init__(self, db: Session, actor: User):
        self.db = db
        self.actor = actor
        self._visible_ids: Optional[Set[int]] = None

    @property
    def role(self) -> str:
        return self.actor.role

    @property
    def is_super_admin(self) -> bool:
        return self.actor.role == UserRole.SUPER_ADMIN.value

    @property
    def is_admin(self) -> bool:
        return self.actor.role in ADMIN_ROLES

    def visible_user_ids(self) -> Set[int]:
        """User ids whose todos the actor may see"""
        if self._visible_ids is None:
            if self.is_super_admin:
                self._visible_ids = {row[0] for row in self.db.query(User.id).all()}
            elif self.actor.role == UserRole.ADMIN.value:
                subordinates = HierarchyManager(self.db).get_all_subordinate_ids(self.actor.id)
                self._visible_ids = {self.actor.id} | subordinates
            else:
                self._visible_ids = {self.actor.id}
        return self._visible_ids

    def can_see_todo(self, todo: Todo) -> bool:
        visible = self.visible_user_ids()
        return todo.created_by in visible or (
            todo.assigned_to is not None and todo.assigned_to in visible
        )

    def _deny(self, exc_class, detail: str = None):
        logger.warning(f"Denied {self.actor.role} {self.actor.id}: {detail or exc_class.default_detail}")
        raise exc_class(detail)

    # Todo operations

    def ensure_can_create_todo(self, assignee_id: Optional[int]) -> None:
        if assignee_id is None or assignee_id == self.actor.id or self.is_admin:
            return
        self._deny(Forbidden, "Users can only create todos for themselves")

    def ensure_can_complete(self, todo: Todo) -> None:
        if not self.can_see_todo(todo):
            self._deny(Forbidden, "You cannot update this todo")

    def ensure_reassign_role(self) -> None:
        if not self.is_admin:
            self._deny(Forbidden, "Users cannot reassign todos")

    def ensure_can_reassign(self, todo: Todo, assignee_id: int) -> None:
        self.ensure_reassign_role()
        if self.is_super_admin:
            return
        if not self.can_see_todo(todo) or assignee_id not in self.visible_user_ids():
            self._deny(Forbidden, "You can only reassign within your team")

    def ensure_can_delete_todo(self, todo: Todo) -> None:
        if self.is_admin:
            if not self.can_see_todo(todo):
                self._deny(Forbidden, "You cannot delete this todo")
            return
        if todo.created_by != self.actor.id:
            self._deny(Forbidden, "You can only delete todos you created")

    # User administration

    def ensure_admin(self) -> None:
        if not self.is_admin:
            self._deny(InsufficientRole)

    def ensure_can_assign_role(self, role: str) -> None:
        if role == UserRole.SUPER_ADMIN.value and not self.is_super_admin:
            self._deny(ForbiddenRoleEscalation)

    def ensure_can_manage_target(self, target: User) -> None:
        """Admins never act on a super_admin"""
        if target.role == UserRole.SUPER_ADMIN.value and not self.is_super_admin:
            self._deny(ForbiddenTarget, "Admins cannot manage a super_admin")

    def ensure_can_delete_target(self, target: User) -> None:
        self.ensure_can_manage_target(target)
        if not self.is_super_admin and target.id not in self.visible_user_ids():
            self._deny(ForbiddenTarget, "You can only delete users in your team")
