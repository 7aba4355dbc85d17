# backend/database.py
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import os
from dotenv import load_dotenv

load_dotenv()

# 1. Database URL from the environment, local SQLite file otherwise
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./canastas.db")

# 2. SQLAlchemy needs postgresql:// instead of the legacy postgres:// scheme
if SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

# 3. Engine options depending on the backend
engine_kwargs = {}
if "sqlite" in SQLALCHEMY_DATABASE_URL:
    engine_kwargs["connect_args"] = {"check_same_thread": False} # SQLite only
    if SQLALCHEMY_DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        # In-memory database must live on a single shared connection
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def transaction(db: Session):
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise

def init_db():
    # Register every mapped table before creating the schema
    import models.users  # noqa: F401
    import models.catalog  # noqa: F401
    import models.order  # noqa: F401
    import models.log  # noqa: F401
    Base.metadata.create_all(bind=engine)
