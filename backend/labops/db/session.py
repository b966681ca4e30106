"""
Database session management
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from labops.core.config import settings
from labops.exceptions import StoreWriteError
from labops.logging_config import get_logger

logger = get_logger(__name__)

connection_string = settings.DATABASE_URL

connect_args = {}
if connection_string.startswith("sqlite"):
    # Sessions are used from FastAPI's worker threads
    connect_args["check_same_thread"] = False

engine = create_engine(
    connection_string,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,  # Verify connections before using
    connect_args=connect_args,
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Key in Session.info tracking how many unit_of_work blocks are open
_UOW_DEPTH = "labops_uow_depth"


def get_db():
    """
    Dependency for getting database session

    Usage in FastAPI endpoints:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, operation: str = "write") -> Iterator[Session]:
    """
    Group store writes into a single transaction.

    Blocks nest: only the outermost block commits. Any SQLAlchemy failure
    rolls the whole session back and is re-raised as StoreWriteError, so
    no partial state reaches the database and loaded objects are expired
    back to their last committed values.

    Usage:
        with unit_of_work(db, "start milling"):
            item_store.update(item_id, patch)
            form_store.create(snapshot)
    """
    depth = db.info.get(_UOW_DEPTH, 0)
    db.info[_UOW_DEPTH] = depth + 1
    try:
        yield db
        if depth == 0:
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"Store write failed during {operation}: {e}",
            extra={"operation": operation},
        )
        raise StoreWriteError(f"Failed to persist {operation}", operation=operation) from e
    except Exception:
        if depth == 0:
            db.rollback()
        raise
    finally:
        db.info[_UOW_DEPTH] = depth
