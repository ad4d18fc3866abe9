# purchase_planning/db/connection.py
from contextlib import contextmanager
from typing import Any, Dict, Literal, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL
from sqlalchemy.orm import sessionmaker
from supabase import create_client, Client

from purchase_planning.config import config
from purchase_planning.exceptions import ConfigError, DatabaseError
from purchase_planning.logging_setup import get_logger
from purchase_planning.models import Base

DatabaseType = Literal["postgresql", "supabase"]

ENGINE_OPTIONS = ('pool_size', 'max_overflow', 'pool_timeout', 'pool_recycle', 'echo')

log = get_logger('database')

def build_connection_url(settings: Dict[str, Any]) -> URL:
    """Build the SQLAlchemy URL of the configured PostgreSQL database."""
    return URL.create(
        drivername=settings['engine'],
        username=settings['username'],
        password=settings['password'],
        host=settings['host'],
        port=settings['port'],
        database=settings['database']
    )

class DatabaseConnection:
    """Connection to the store holding sales, purchases and finance rows.

    Either a PostgreSQL engine with a session factory or a Supabase client,
    depending on ``DATABASE.type``. Nothing connects until the first engine,
    session or client is asked for.
    """

    _instance = None

    def __new__(cls):
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._db_type: Optional[str] = None
        self._engine = None
        self._session_factory = None
        self._supabase: Optional[Client] = None
        self._initialized = True

    def initialize(self, connection_url=None):
        """Open the connection selected in configuration.

        Args:
            connection_url: Optional SQLAlchemy URL; forces the SQL backend
        """
        if connection_url is not None:
            self._open_engine(connection_url, {})
            return

        settings = config.database_config
        db_type = settings['type']

        if db_type == "supabase":
            self._open_supabase()
        elif db_type == "postgresql":
            options = {name: settings[name] for name in ENGINE_OPTIONS}
            self._open_engine(build_connection_url(settings), options)
        else:
            raise ConfigError(f"Unknown database type: {db_type}", code='BAD_DB_TYPE')

    def _open_engine(self, url, options: Dict[str, Any]):
        try:
            self._engine = create_engine(url, **options)
            self._session_factory = sessionmaker(bind=self._engine)
        except Exception as e:
            raise DatabaseError(f"Failed to initialize SQL database: {str(e)}")

        self._db_type = "postgresql"
        log.info(f"SQL engine ready for {self._engine.url.render_as_string(hide_password=True)}")

    def _open_supabase(self):
        credentials = config.supabase_config

        if not credentials['url'] or not credentials['key']:
            raise ConfigError(
                "Supabase URL and key must be set in SUPABASE_URL/SUPABASE_KEY or the config file",
                code='MISSING_CREDENTIALS'
            )

        try:
            self._supabase = create_client(credentials['url'], credentials['key'])
        except Exception as e:
            raise DatabaseError(f"Failed to initialize Supabase: {str(e)}")

        self._db_type = "supabase"
        log.info("Supabase client ready")

    @property
    def db_type(self) -> DatabaseType:
        if self._db_type is None:
            self.initialize()
        return self._db_type

    def _require(self, db_type: str, what: str):
        if self.db_type != db_type:
            raise DatabaseError(f"{what} is only available for {db_type} connections")

    @property
    def engine(self):
        self._require("postgresql", "engine")
        return self._engine

    def get_supabase(self) -> Client:
        self._require("supabase", "get_supabase")
        return self._supabase

    def get_session(self):
        """Get a new SQLAlchemy session."""
        self._require("postgresql", "get_session")
        return self._session_factory()

    @contextmanager
    def session_scope(self):
        """Provide a transactional scope around a series of operations."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all_tables(self):
        Base.metadata.create_all(self.engine)

    def drop_all_tables(self):
        Base.metadata.drop_all(self.engine)

# Singleton instance
db = DatabaseConnection()

@contextmanager
def session_scope():
    """Context manager for database sessions."""
    with db.session_scope() as session:
        yield session
