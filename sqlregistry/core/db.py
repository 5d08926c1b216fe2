import threading

from sqlalchemy.engine import Engine
from sqlmodel import create_engine

from sqlregistry.core.config import settings

_engine: Engine | None = None
_engine_lock = threading.Lock()


def get_engine() -> Engine | None:
    """Engine for DATABASE_URL, created on first use. None when DATABASE_URL is unset."""
    global _engine
    if not settings.DATABASE_URL:
        return None
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
    return _engine
