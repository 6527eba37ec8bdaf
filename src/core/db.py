from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

import models  # noqa: F401
from core.config import settings

# make sure all SQLModel models are imported (models) before initializing DB
# otherwise, SQLModel might fail to initialize relationships properly
# for more details: https://github.com/tiangolo/full-stack-fastapi-postgresql/issues/28


def build_engine(url: str, echo: bool = False):
    if url.startswith("sqlite"):
        # one shared connection so an in-memory database outlives a single session
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(str(settings.SQLALCHEMY_DATABASE_URI), echo=settings.SQL_ECHO)


def init_db(db_engine=None) -> None:
    SQLModel.metadata.create_all(db_engine or engine)
