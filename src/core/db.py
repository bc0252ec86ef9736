from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from core.config import settings


def get_engine(database_uri: str):
    if database_uri.startswith("sqlite"):
        # a single shared connection so an in-memory database survives across sessions
        return create_engine(
            database_uri,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_uri)


engine = get_engine(str(settings.SQLALCHEMY_DATABASE_URI))


# make sure all SQLModel models are imported (models) before initializing DB
# otherwise, SQLModel might fail to create the tables
def init_db(db_engine=None):
    import models  # noqa: F401

    SQLModel.metadata.create_all(db_engine or engine)


def get_session(db_engine=None) -> Session:
    return Session(db_engine or engine)
