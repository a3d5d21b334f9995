# casetrack/database.py
import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the connection pool and the session factory.

    Built once by the app factory, kept on ``app.state.db`` and disposed on
    shutdown.
    """

    def __init__(self, url: str, pool_size: int = 10):
        self.url = url

        # SQLite needs thread sharing enabled for the threadpool handlers
        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            engine_kwargs = {}
        else:
            connect_args = {}
            engine_kwargs = {"pool_size": pool_size, "max_overflow": 0, "pool_pre_ping": True}

        self.engine = create_engine(url, connect_args=connect_args, **engine_kwargs)

        if url.startswith("sqlite"):
            # SQLite leaves foreign keys (and ON DELETE CASCADE) off by default
            @event.listens_for(self.engine, "connect")
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self):
        # Import models so every table is registered on Base.metadata
        import casetrack.models.users  # noqa: F401
        import casetrack.models.person  # noqa: F401
        import casetrack.models.document  # noqa: F401
        import casetrack.models.log  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created/verified")

    def dispose(self):
        self.engine.dispose()
        logger.info("Database connection pool closed")


def get_db(request: Request):
    db = request.app.state.db.SessionLocal()
    try:
        yield db
    finally:
        db.close()
