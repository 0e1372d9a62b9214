from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from drawkit import config
from .utils import resolve_sqlite_url

DEFAULT_SQLITE_URL = resolve_sqlite_url(config.DB_URL, config.ROOT_DIR)


def make_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``, defaulting to ``DB_URL``."""
    url = database_url or DEFAULT_SQLITE_URL
    return create_engine(url, echo=echo, future=True)


def get_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Keep participants readable after commit
        future=True,
    )
