from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for all database models
Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """
    Create the database engine for a connection string.

    PostgreSQL is the production store. SQLite is accepted for local runs and
    tests; an in-memory SQLite database is shared across threads through a
    single static connection, otherwise every new connection would see an
    empty database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    # pool_pre_ping drops connections the server closed while idle
    return create_engine(database_url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    # autocommit=False: repositories commit explicitly
    # autoflush=False: pending writes only reach the database on commit
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    Dependency for getting a database session.

    The session factory is built once by the application factory and kept on
    app.state. The session is closed after the request completes.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        # Always close session, even if request raises an exception
        db.close()
