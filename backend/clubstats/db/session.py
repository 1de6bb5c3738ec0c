from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clubstats.core.config import settings

# SQLite needs this when FastAPI serves requests from several threads
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# FastAPI dependency: one session per request, closed at the end
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
