import logging
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, Session

from app.utils.exceptions import StorageFailure

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./todos.db")

# SQLite connections are shared across FastAPI's threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# ✅ This is required to be imported wherever DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_session(db: Session, action: str, integrity_error=None):
    """Commit, or roll back and surface a typed failure.

    ``integrity_error`` maps a constraint violation that slipped past the
    caller's own checks (two concurrent inserts, say) to a specific failure.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if integrity_error is not None:
            logger.warning(f"Constraint violation while trying to {action}: {e}")
            raise integrity_error() from e
        logger.exception(f"Constraint violation while trying to {action}")
        raise StorageFailure() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Database error while trying to {action}")
        raise StorageFailure() from e
