# purchase_planning/db/__init__.py
from contextlib import contextmanager
from typing import Iterator

from .connection import DatabaseConnection, build_connection_url, db, session_scope
from .interface import DataSource, SupabaseDataSource, SQLAlchemyDataSource

from purchase_planning.exceptions import DatabaseError

@contextmanager
def open_data_source() -> Iterator[DataSource]:
    """Data source for the configured database type.

    On PostgreSQL the session is closed when the block exits.
    """
    if db.db_type == "supabase":
        yield SupabaseDataSource(db.get_supabase())
        return

    with db.session_scope() as session:
        yield SQLAlchemyDataSource(session)

def create_all_tables():
    """Create all tables (PostgreSQL only).

    Supabase tables are created through SQL migrations instead.
    """
    if db.db_type != "postgresql":
        raise DatabaseError("create_all_tables is only available for PostgreSQL")
    db.create_all_tables()

def drop_all_tables():
    if db.db_type != "postgresql":
        raise DatabaseError("drop_all_tables is only available for PostgreSQL")
    db.drop_all_tables()

__all__ = [
    'db',
    'session_scope',
    'open_data_source',
    'create_all_tables',
    'drop_all_tables',
    'build_connection_url',
    'DataSource',
    'SupabaseDataSource',
    'SQLAlchemyDataSource',
    'DatabaseConnection'
]
