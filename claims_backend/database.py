import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./claims.db")

engine = create_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_claim_schema_checked = False


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores foreign keys unless asked per connection.
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_claim_schema(bind=None) -> None:
    """Create the composite claim lookup indexes once the claims table exists.

    They are not declared on the model, so this runs on startup after
    ``create_all``. It only ensures the indexes exist and alters no columns.
    """
    global _claim_schema_checked

    if _claim_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _claim_schema_checked:
            return

        inspector = inspect(bind)

        if 'claims' not in inspector.get_table_names():
            _claim_schema_checked = True
            return

        index_steps = [
            'CREATE INDEX IF NOT EXISTS idx_claims_center_status ON claims(center_id, status)',
            'CREATE INDEX IF NOT EXISTS idx_claims_submitter_submitted ON claims(submitted_by_id, submitted_at)',
        ]

        with bind.begin() as connection:
            for statement in index_steps:
                connection.execute(text(statement))

        _claim_schema_checked = True
