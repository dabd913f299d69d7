import os
from functools import lru_cache
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from ieee_quiz.config import get_settings


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()

    # Ensure data directory exists
    db_dir = os.path.dirname(settings.db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    return create_engine(
        f"sqlite:///{settings.db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


def init_db(engine: Optional[Engine] = None):
    # Table classes must be imported before create_all
    from ieee_quiz import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())


def get_session():
    with Session(get_engine()) as session:
        yield session
