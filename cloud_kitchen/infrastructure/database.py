from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def create_session_factory(database_url: str, **engine_kwargs):
    """Build an engine + session factory for the remote store."""
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine_kwargs.setdefault("poolclass", StaticPool)
    else:
        engine_kwargs.setdefault("pool_pre_ping", True)

    engine = create_engine(database_url, **engine_kwargs)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, SessionLocal


def init_schema(engine) -> None:
    # Import for side effects: registers the tables on Base.metadata
    import cloud_kitchen.domain.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
