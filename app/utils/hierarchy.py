# app/utils/hierarchy.py
import logging
import threading
from typing import Iterable, List, Set

from sqlalchemy.orm import Session

from app.config.security import SecurityConfig
from app.database import commit_session
from app.models.user import User, user_managers
from app.utils.exceptions import AlreadyExists, CyclicHierarchy, EdgeNotFound, NotFound

logger = logging.getLogger(__name__)

# Serialises check-then-act sequences on the manager graph (edge admission,
# primary manager changes, user deletion) within this process.
hierarchy_lock = threading.RLock()


class HierarchyManager:
    """Manager -> subordinate graph built from two relations.

    A user reports to at most one primary manager (``users.manager_id``) and
    to any number of supplementary managers (``user_managers``). Both count
    as edges of the same graph when computing who can see whom.
    """

    def __init__(self, db: Session):
        self.db = db

    def _primary_children(self, manager_ids: Iterable[int]) -> Set[int]:
        rows = self.db.query(User.id).filter(User.manager_id.in_(list(manager_ids))).all()
        return {row[0] for row in rows}

    def _edge_children(self, manager_ids: Iterable[int]) -> Set[int]:
        rows = self.db.query(user_managers.c.user_id).filter(
            user_managers.c.manager_id.in_(list(manager_ids))
        ).all()
        return {row[0] for row in rows}

    def _children(self, manager_ids: Set[int], include_primary: bool = True) -> Set[int]:
        children = self._edge_children(manager_ids)
        if include_primary:
            children |= self._primary_children(manager_ids)
        return children

    def get_direct_subordinate_ids(self, user_id: int) -> Set[int]:
        """Users reporting directly to user_id through either relation"""
        return self._children({user_id})

    def get_all_subordinate_ids(self, user_id: int) -> Set[int]:
        """Get all subordinates (direct and indirect) for a given user.

        Breadth-first over both relations at once. The visited set makes the
        walk terminate even if stored data already contains a cycle; the
        starting user is never reported as their own subordinate.
        """
        visited = {user_id}
        frontier = {user_id}
        while frontier:
            frontier = self._children(frontier) - visited
            visited |= frontier
        visited.discard(user_id)
        return visited

    def would_create_cycle(self, user_id: int, manager_id: int) -> bool:
        """Would making manager_id a manager of user_id close a loop?

        True when manager_id already sits below user_id. Whether the primary
        manager pointer is followed depends on CYCLE_CHECK_SCOPE.
        """
        if user_id == manager_id:
            return True

        include_primary = SecurityConfig.walks_primary_managers()
        visited = {user_id}
        frontier = {user_id}
        while frontier:
            children = self._children(frontier, include_primary=include_primary)
            if manager_id in children:
                return True
            frontier = children - visited
            visited |= frontier
        return False

    def edge_exists(self, user_id: int, manager_id: int) -> bool:
        row = self.db.query(user_managers.c.user_id).filter(
            user_managers.c.user_id == user_id,
            user_managers.c.manager_id == manager_id
        ).first()
        return row is not None

    def get_managers(self, user_id: int) -> List[User]:
        """Supplementary managers of a user, ordered by name"""
        return self.db.query(User).join(
            user_managers, user_managers.c.manager_id == User.id
        ).filter(user_managers.c.user_id == user_id).order_by(User.username).all()

    def count_primary_subordinates(self, user_id: int) -> int:
        return self.db.query(User).filter(User.manager_id == user_id).count()

    def _lock_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).with_for_update().first()
        if not user:
            raise NotFound("User not found")
        return user

    def add_manager_edge(self, user_id: int, manager_id: int) -> None:
        """Make manager_id a supplementary manager of user_id"""
        with hierarchy_lock:
            self._lock_user(user_id)
            self._lock_user(manager_id)

            if self.would_create_cycle(user_id, manager_id):
                logger.warning(f"Rejected manager edge {user_id} -> {manager_id}: cycle")
                raise CyclicHierarchy()

            if self.edge_exists(user_id, manager_id):
                raise AlreadyExists()

            self.db.execute(user_managers.insert().values(user_id=user_id, manager_id=manager_id))
            commit_session(self.db, "add manager edge", integrity_error=AlreadyExists)
            logger.info(f"Added manager {manager_id} for user {user_id}")

    def remove_manager_edge(self, user_id: int, manager_id: int) -> None:
        with hierarchy_lock:
            result = self.db.execute(
                user_managers.delete().where(
                    user_managers.c.user_id == user_id,
                    user_managers.c.manager_id == manager_id
                )
            )
            if result.rowcount == 0:
                self.db.rollback()
                raise EdgeNotFound()
            commit_session(self.db, "remove manager edge")
            logger.info(f"Removed manager {manager_id} from user {user_id}")

    def remove_edges_for_user(self, user_id: int) -> None:
        """Drop every edge touching user_id; the caller commits"""
        self.db.execute(
            user_managers.delete().where(
                (user_managers.c.user_id == user_id) | (user_managers.c.manager_id == user_id)
            )
        )
