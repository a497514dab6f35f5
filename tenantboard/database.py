"""Database configuration and initialization."""
from contextlib import contextmanager

from flask import current_app
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()


class Database:
    """Engine + scoped session pair owned by one Flask application."""

    def __init__(self, engine):
        self.engine = engine
        self.session = scoped_session(
            sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
        )

    def create_all(self):
        """Create every table known to the declarative base."""
        # Import models so they register on Base.metadata
        import tenantboard.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        import tenantboard.models  # noqa: F401
        Base.metadata.drop_all(bind=self.engine)

    def ping(self):
        """Return True when the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text('SELECT 1'))
        return True


def _build_engine(config):
    database_uri = config['SQLALCHEMY_DATABASE_URI']
    echo = config.get('SQLALCHEMY_ECHO', False)

    if database_uri.startswith('sqlite'):
        # In-memory SQLite must share one connection across the whole app
        engine = create_engine(
            database_uri,
            echo=echo,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )

        @event.listens_for(engine, 'connect')
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute('PRAGMA foreign_keys=ON')
            cursor.close()

        return engine

    return create_engine(
        database_uri,
        echo=echo,
        pool_pre_ping=True,  # Enable connection health checks
        pool_size=config.get('SQLALCHEMY_POOL_SIZE', 10),
        max_overflow=config.get('SQLALCHEMY_MAX_OVERFLOW', 20),
    )


def init_db(app):
    """Initialize database connection and attach it to the app."""
    database = Database(_build_engine(app.config))
    app.extensions['database'] = database

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            database.session.rollback()
        database.session.remove()

    return database


def get_database():
    """Get the Database bound to the current application."""
    return current_app.extensions['database']


def get_session():
    """Get database session."""
    return get_database().session


@contextmanager
def transaction(session):
    """
    Commit the enclosed unit of work, or roll all of it back.

    Used for multi-record writes that must become visible together.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def violates_unique(error, column):
    """
    True when an IntegrityError was raised by a unique index on `column`.

    SQLite reports 'UNIQUE constraint failed: tenants.subdomain', PostgreSQL
    reports the index name (e.g. 'tenants_subdomain_key'); both carry the
    column name.
    """
    message = str(getattr(error, 'orig', error)).lower()
    return column.lower() in message


def is_unique_violation(error):
    """True when an IntegrityError came from any unique index or constraint."""
    orig = getattr(error, 'orig', error)
    if getattr(orig, 'pgcode', None) == '23505':
        return True
    message = str(orig).lower()
    return 'unique constraint' in message or 'duplicate key' in message
