from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from typing import Generator
import redis
from .config import settings

database_url = settings.get_database_url

if database_url.startswith("sqlite"):
    engine = create_engine(
        database_url, connect_args={"check_same_thread": False}
    )
else:
    # PostgreSQL with appropriate connection pool settings
    engine = create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Redis setup - mock for testing
if settings.TESTING:
    # Use a simple dict-based mock for Redis in tests
    class RedisMock:
        def __init__(self):
            self.data = {}
        
        def setex(self, key, time, value):
            self.data[key] = value
            return True
        
        def get(self, key):
            return self.data.get(key)
        
        def delete(self, key):
            if key in self.data:
                del self.data[key]
            return 1
        
        def incr(self, key):
            if key in self.data:
                try:
                    self.data[key] = str(int(self.data[key]) + 1)
                except ValueError:
                    self.data[key] = "1"
            else:
                self.data[key] = "1"
            return int(self.data[key])
        
        def flushdb(self):
            self.data.clear()
            return True
    
    redis_client = RedisMock()
else:
    # Real Redis client for production
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Redis dependency
def get_redis():
    """Get Redis client."""
    return redis_client

# Database initialization
def init_db():
    """Initialize database tables."""
    # Models must be imported so their tables register on Base.metadata
    from ..models import practitioner, appointment  # noqa: F401
    Base.metadata.create_all(bind=engine)
