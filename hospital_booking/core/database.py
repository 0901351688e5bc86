from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from .config import settings

Base = declarative_base()

def make_engine(database_url: str):
    """Create an engine with pool settings suited to the backend."""
    if database_url.startswith("sqlite"):
        # Request handlers run on a thread pool
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

engine = make_engine(settings.get_database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Database initialization
def init_db(bind=None):
    """Initialize database tables."""
    # Register the mapped classes on Base.metadata
    from ..models import appointment, patient  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
