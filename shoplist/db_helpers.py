import logging
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.orm import sessionmaker

from shoplist.entities import Base

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("shoplist_backend")

# --- Configuration ---
DB_PATH             = os.getenv("DB_PATH", "./shopping.db")
DATABASE_URL        = os.getenv("DATABASE_URL", "")
DB_BUSY_TIMEOUT_MS  = int(os.getenv("DB_BUSY_TIMEOUT_MS", "3000"))

APP_PIN             = os.getenv("APP_PIN", "")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(24 * 3600)))
DEFAULT_LIST_NAME   = os.getenv("DEFAULT_LIST_NAME", "Lista Principal")

HOST                = os.getenv("HOST", "0.0.0.0")
PORT                = int(os.getenv("PORT", "8080"))
CORS_ALLOW_ORIGINS  = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o.strip()]


def build_db_url(db_path: str | None = None) -> str:
    # an explicit path wins; DATABASE_URL overrides DB_PATH (SQLite URLs only)
    if DATABASE_URL and db_path is None:
        return DATABASE_URL
    return f"sqlite:///{db_path or DB_PATH}"


def get_db_engine(db_url: str | None = None, busy_timeout_ms: int = DB_BUSY_TIMEOUT_MS):
    url = db_url or build_db_url()
    logger.info(f"[DB] Using database URL: {url}")

    # request handlers run in a thread pool; one connection may cross threads
    engine = create_engine(
        url,
        future=True,
        connect_args={"check_same_thread": False, "timeout": busy_timeout_ms / 1000},
    )

    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")
        cursor.close()

    return engine


def has_column(engine, table: str, column: str) -> bool:
    return any(c["name"] == column for c in inspect(engine).get_columns(table))


def migrate_schema(engine) -> None:
    """
    Create missing tables and bring databases written by older releases
    up to date. Items created before lists existed have no list_id column;
    they land on list 1, which bootstrap creates when the lists table is empty.
    """
    Base.metadata.create_all(engine)

    if not has_column(engine, "items", "list_id"):
        logger.info("[DB] Adding items.list_id column to legacy schema")
        with engine.begin() as conn:
            conn.execute(text("ALTER TABLE items ADD COLUMN list_id INTEGER DEFAULT 1"))


def create_session_factory(engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        future=True,
    )
