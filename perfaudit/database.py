"""
Database engine + session factory.

Defaults to SQLite for local dev; production points DATABASE_URL at the
MySQL/MariaDB instance that holds the log_action catalogue.
get_session() always returns a real session.
"""
import hashlib

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from perfaudit.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


def _sha1(value):
    if value is None:
        return None
    if not isinstance(value, bytes):
        value = str(value).encode('utf-8')
    return hashlib.sha1(value).hexdigest()


def register_sqlite_functions(engine):
    """Give SQLite connections the SHA1() function MySQL has built in."""
    @event.listens_for(engine, 'connect')
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function('sha1', 1, _sha1)
    return engine


url = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

# SQLite needs different engine kwargs than server databases
if url.startswith('sqlite'):
    engine = register_sqlite_functions(
        create_engine(url, connect_args={'check_same_thread': False})
    )
else:
    engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)

SessionLocal = sessionmaker(bind=engine)


def get_session():
    """Return a new DB session."""
    return SessionLocal()
