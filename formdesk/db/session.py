from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from formdesk.core.config.settings import get_settings

DATABASE_URL = get_settings().DATABASE_URL

# SQLite connections are used from FastAPI's threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create engine
engine = create_engine(DATABASE_URL, connect_args=connect_args)

# Create session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
