# create_tables.py
import logging

from sqlalchemy.orm import Session

from app.config.security import SecurityConfig
from app.database import Base, SessionLocal, engine
from app.models import Todo, User, UserRole, user_managers  # noqa: F401 - registers tables
from app.utils.security import get_password_hash

logger = logging.getLogger(__name__)

# Default accounts; they have no login name and sign in with their username.
# manager_index points at an earlier entry of this list.
DEFAULT_USERS = [
    {"username": "Super Admin", "role": UserRole.SUPER_ADMIN.value, "manager_index": None},
    {"username": "Department Manager", "role": UserRole.ADMIN.value, "manager_index": 0},
    {"username": "Employee A", "role": UserRole.USER.value, "manager_index": 1},
    {"username": "Employee B", "role": UserRole.USER.value, "manager_index": 1},
]


def seed_default_users(db: Session, password: str = None) -> int:
    """Insert the default accounts into an empty users table"""
    if db.query(User).count() > 0:
        logger.info("Users already exist, skipping default accounts")
        return 0

    hashed = get_password_hash(password or SecurityConfig.SEED['default_password'])
    created = []
    for entry in DEFAULT_USERS:
        manager = created[entry["manager_index"]] if entry["manager_index"] is not None else None
        user = User(
            username=entry["username"],
            login_name=None,
            hashed_password=hashed,
            role=entry["role"],
            manager_id=manager.id if manager else None,
        )
        db.add(user)
        db.flush()
        created.append(user)

    db.commit()
    logger.info(f"Created {len(created)} default accounts")
    return len(created)


def init_database(seed: bool = None):
    """Create missing tables and optionally seed the default accounts"""
    Base.metadata.create_all(bind=engine)
    if seed is None:
        seed = SecurityConfig.SEED['default_users']
    if seed:
        db = SessionLocal()
        try:
            seed_default_users(db)
        finally:
            db.close()


def create_tables():
    """Drop and recreate all tables, then seed the default accounts"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("✅ All tables created successfully!")

    db = SessionLocal()
    try:
        count = seed_default_users(db)
    finally:
        db.close()

    if count:
        print("✅ Default accounts created!")
        for entry in DEFAULT_USERS:
            print(f"   {entry['username']} ({entry['role']})")
        print(f"   Password: {SecurityConfig.SEED['default_password']}")

if __name__ == "__main__":
    create_tables()
