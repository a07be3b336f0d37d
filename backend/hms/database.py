"""
Database configuration - SQLite persistence layer
The database only backs the key-value medium; all business rules live in the services
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base

from hms.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create tables"""
    from hms.storage import backends  # noqa - registers the hms_storage table
    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    if bind.dialect.name == "sqlite" and ":memory:" not in str(bind.url):
        # WAL mode for better read concurrency
        with bind.connect() as conn:
            conn.execute(text("PRAGMA journal_mode=WAL"))
            conn.execute(text("PRAGMA synchronous=NORMAL"))
            conn.commit()
