import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from app.config.security import SecurityConfig
from app.database import commit_session
from app.models.todo import Todo
from app.models.user import User, UserRole
from app.utils.exceptions import (
    CyclicHierarchy,
    DuplicateHandle,
    EmptyText,
    InvalidCredential,
    NotFound,
    PasswordTooShort,
    SelfDeleteForbidden,
    HasSubordinates,
)
from app.utils.hierarchy import HierarchyManager, hierarchy_lock
from app.utils.permissions import AccessControl, ADMIN_ROLES
from app.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

# Marks an update field the caller did not send
UNSET = object()


def _check_password_length(password: str) -> None:
    min_length = SecurityConfig.LIMITS['password_min_length']
    if password is None or len(password) < min_length:
        raise PasswordTooShort(f"Password must be at least {min_length} characters")


class UserService:
    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")
        return user

    @staticmethod
    def authenticate(db: Session, handle: str, password: str) -> User:
        """Resolve a login handle and verify its password.

        The handle matches ``login_name``, or ``username`` on older rows that
        have no login name. Unknown handles and wrong passwords fail the same
        way so callers cannot tell which accounts exist.
        """
        user = db.query(User).filter(
            or_(
                User.login_name == handle,
                and_(User.login_name.is_(None), User.username == handle)
            )
        ).order_by(User.id).first()

        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login for handle {handle!r}")
            raise InvalidCredential()

        logger.info(f"User {user.id} logged in")
        return user

    @staticmethod
    def get_visible_user(db: Session, actor: User, user_id: int) -> User:
        """A single user, hidden as NotFound when outside the actor's view"""
        if user_id not in AccessControl(db, actor).visible_user_ids():
            raise NotFound("User not found")
        return UserService.get_user(db, user_id)

    @staticmethod
    def list_visible_users(db: Session, actor: User) -> List[User]:
        ids = AccessControl(db, actor).visible_user_ids()
        return db.query(User).filter(User.id.in_(list(ids))).order_by(User.id).all()

    @staticmethod
    def list_users_detailed(db: Session, actor: User) -> List[User]:
        """Every user with manager details, for the admin screen"""
        AccessControl(db, actor).ensure_admin()
        query = db.query(User).options(joinedload(User.manager), joinedload(User.managers))
        # Department admins do not see super admins
        if actor.role == UserRole.ADMIN.value:
            query = query.filter(User.role != UserRole.SUPER_ADMIN.value)
        return query.order_by(User.id).all()

    @staticmethod
    def list_manager_candidates(db: Session) -> List[User]:
        return db.query(User).filter(User.role.in_(sorted(ADMIN_ROLES))).order_by(User.username).all()

    @staticmethod
    def _ensure_unique(db: Session, username: str = None, login_name: str = None, exclude_id: int = None):
        conditions = []
        if username is not None:
            conditions.append(User.username == username)
        if login_name is not None:
            conditions.append(User.login_name == login_name)
        if not conditions:
            return
        query = db.query(User.id).filter(or_(*conditions))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise DuplicateHandle()

    @staticmethod
    def create_user(
        db: Session,
        actor: User,
        username: str,
        login_name: str,
        password: str,
        role: str = UserRole.USER.value,
        manager_id: Optional[int] = None,
    ) -> User:
        access = AccessControl(db, actor)
        access.ensure_admin()
        role = UserRole(role).value
        access.ensure_can_assign_role(role)
        _check_password_length(password)

        username = username.strip()
        login_name = login_name.strip()
        if not username or not login_name:
            raise EmptyText("Username and login name cannot be empty")

        with hierarchy_lock:
            UserService._ensure_unique(db, username=username, login_name=login_name)
            if manager_id is not None:
                UserService.get_user(db, manager_id)

            user = User(
                username=username,
                login_name=login_name,
                hashed_password=get_password_hash(password),
                role=role,
                manager_id=manager_id,
            )
            db.add(user)
            commit_session(db, "create user", integrity_error=DuplicateHandle)
            db.refresh(user)

        logger.info(f"User {actor.id} created user {user.id} ({role})")
        return user

    @staticmethod
    def update_user(
        db: Session,
        actor: User,
        target_id: int,
        role: str,
        username=UNSET,
        manager_id=UNSET,
    ) -> User:
        access = AccessControl(db, actor)
        access.ensure_admin()
        role = UserRole(role).value

        with hierarchy_lock:
            target = UserService.get_user(db, target_id)
            access.ensure_can_manage_target(target)
            access.ensure_can_assign_role(role)

            rename = username is not UNSET and username is not None
            if rename:
                username = username.strip()
                if not username:
                    raise EmptyText("Username cannot be empty")
                UserService._ensure_unique(db, username=username, exclude_id=target.id)

            if manager_id is not UNSET and manager_id is not None:
                UserService._check_primary_manager(db, target.id, manager_id)

            if rename:
                target.username = username
            if manager_id is not UNSET:
                target.manager_id = manager_id
            target.role = role
            commit_session(db, "update user", integrity_error=DuplicateHandle)
            db.refresh(target)

        logger.info(f"User {actor.id} updated user {target.id}")
        return target

    @staticmethod
    def _check_primary_manager(db: Session, user_id: int, manager_id: int) -> None:
        """A user may never end up managing themselves, directly or not"""
        if user_id == manager_id:
            raise CyclicHierarchy("A user cannot be their own manager")
        UserService.get_user(db, manager_id)
        if manager_id in HierarchyManager(db).get_all_subordinate_ids(user_id):
            logger.warning(f"Rejected primary manager {manager_id} for user {user_id}: cycle")
            raise CyclicHierarchy()

    @staticmethod
    def delete_user(db: Session, actor: User, target_id: int) -> None:
        """Delete a user along with every todo they created or were assigned"""
        access = AccessControl(db, actor)
        access.ensure_admin()
        if target_id == actor.id:
            raise SelfDeleteForbidden()

        with hierarchy_lock:
            hierarchy = HierarchyManager(db)
            target = db.query(User).filter(User.id == target_id).with_for_update().first()
            if not target:
                raise NotFound("User not found")
            access.ensure_can_delete_target(target)

            if hierarchy.count_primary_subordinates(target.id) > 0:
                raise HasSubordinates()

            db.query(Todo).filter(
                or_(Todo.created_by == target.id, Todo.assigned_to == target.id)
            ).delete(synchronize_session="fetch")
            hierarchy.remove_edges_for_user(target.id)
            db.delete(target)
            commit_session(db, "delete user")

        logger.info(f"User {actor.id} deleted user {target_id}")

    @staticmethod
    def change_own_password(db: Session, user: User, old_password: str, new_password: str) -> None:
        _check_password_length(new_password)
        if not verify_password(old_password, user.hashed_password):
            raise InvalidCredential("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        commit_session(db, "change password")
        logger.info(f"User {user.id} changed their password")

    @staticmethod
    def reset_user_password(db: Session, actor: User, target_id: int, new_password: str) -> None:
        access = AccessControl(db, actor)
        access.ensure_admin()
        _check_password_length(new_password)
        target = UserService.get_user(db, target_id)
        access.ensure_can_manage_target(target)
        target.hashed_password = get_password_hash(new_password)
        commit_session(db, "reset password")
        logger.info(f"User {actor.id} reset the password of user {target.id}")

    # Supplementary manager edges

    @staticmethod
    def get_user_managers(db: Session, actor: User, user_id: int) -> List[User]:
        UserService.get_visible_user(db, actor, user_id)
        return HierarchyManager(db).get_managers(user_id)

    @staticmethod
    def add_manager(db: Session, actor: User, user_id: int, manager_id: int) -> None:
        AccessControl(db, actor).ensure_admin()
        HierarchyManager(db).add_manager_edge(user_id, manager_id)

    @staticmethod
    def remove_manager(db: Session, actor: User, user_id: int, manager_id: int) -> None:
        AccessControl(db, actor).ensure_admin()
        HierarchyManager(db).remove_manager_edge(user_id, manager_id)
