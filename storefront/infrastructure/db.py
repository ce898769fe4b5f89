import time
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
from storefront.core_settings import get_settings
from storefront.core.logging_config import get_logger
from storefront.domain.models import Base

logger = get_logger(__name__)

settings = get_settings()
DATABASE_URL = settings.database_url
# sqlite connections are shared across the request threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, future=True, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_models():
    Base.metadata.create_all(engine)

def wait_for_db(max_attempts: int = 30, delay: float = 1.0, bind=None) -> int:
    """Block until the database accepts connections; return the attempt count."""
    bind = bind or engine
    for attempt in range(1, max_attempts + 1):
        try:
            with bind.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info(f"Database ready after {attempt} attempt(s)")
            return attempt
        except OperationalError as e:
            logger.warning(f"Database not ready (attempt {attempt}): {e}")
            time.sleep(delay)
    raise RuntimeError("Database not ready after max attempts")
