# infra/db/base.py
from __future__ import annotations
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy import create_engine
from pathlib import Path
import logging

from infra.path import default_db_url

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_session_factory(db_url: str | None = None, *, echo: bool = False) -> sessionmaker:
    url = db_url or default_db_url()
    if url.startswith("sqlite:///") and not url.endswith(":memory:"):
        # Make sure parent directory exists for file-backed SQLite
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    logger.info("Using database at: %s", url)

    engine = create_engine(
        url,
        echo=echo,
        future=True,
    )
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
