from pathlib import Path

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

from .logging import logger


class Base(DeclarativeBase):
    pass


# -----------------------------------------
# Engine + session factory
# -----------------------------------------
def create_db_engine(db_path: str) -> Engine:
    """
    Build the SQLite engine for `db_path`.
    Nothing is opened until the first connection is made.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite:///{db_path}",
        future=True,
        connect_args={"check_same_thread": False},
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


# -----------------------------------------
# INITIALIZE SCHEMA
# -----------------------------------------
def init_db(engine: Engine):
    """
    Create tables if they do not exist.
    Does NOT handle migrations by itself.
    """
    from . import models  # noqa
    Base.metadata.create_all(bind=engine)


# -----------------------------------------
# SCHEMA VERSION TABLE
# -----------------------------------------
def get_current_version(db: Session) -> int:
    inspector = inspect(db.bind)

    # Before version table exists
    if "schema_version" not in inspector.get_table_names():
        return 0

    result = db.execute(text("SELECT version FROM schema_version LIMIT 1")).fetchone()
    if not result:
        return 0

    return result[0]


def _set_version(db: Session, version: int):
    db.execute(text("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)"))
    db.execute(text("DELETE FROM schema_version"))
    db.execute(text("INSERT INTO schema_version (version) VALUES (:v)"), {"v": version})


# -----------------------------------------
# AUTOMATIC MIGRATIONS
# -----------------------------------------
def run_migrations(db: Session) -> int:
    """
    Bring an existing vault up to the latest schema version.
    Returns the version the database ends up at.
    """
    version = get_current_version(db)

    # -------------------------------------
    # MIGRATION 0 → 1:
    # Older front-ends stored missing website/email as ''.
    # An optional field is either absent (NULL) or non-empty.
    # -------------------------------------
    if version < 1:
        logger.info("[MIGRATION] Starting migration 0 → 1")

        for column in ("website", "email"):
            result = db.execute(
                text(f"UPDATE password_entries SET {column} = NULL WHERE TRIM({column}) = ''")
            )
            logger.info("[MIGRATION] Cleared empty %s on %s rows", column, result.rowcount)

        _set_version(db, 1)
        db.commit()

        logger.info("[MIGRATION] Migration 0 → 1 complete")
        version = 1

    logger.info("[MIGRATION] Database schema up-to-date version=%s", version)
    return version
