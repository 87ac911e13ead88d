"""Database configuration and initialization."""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# Global session and engine
engine = None
db_session = None


def _engine_options(database_uri: str, echo: bool) -> dict:
    """Build create_engine kwargs for the configured backend."""
    if database_uri.startswith('sqlite'):
        # In-memory SQLite must share one connection across the session registry
        return {
            'echo': echo,
            'poolclass': StaticPool,
            'connect_args': {'check_same_thread': False},
        }
    return {
        'echo': echo,
        'pool_pre_ping': True,  # Enable connection health checks
        'pool_size': 10,
        'max_overflow': 20,
    }


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine = create_engine(
        database_uri,
        **_engine_options(database_uri, app.config.get('SQLALCHEMY_ECHO', False))
    )

    if engine.dialect.name == 'sqlite':
        @event.listens_for(engine, 'connect')
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute('PRAGMA foreign_keys=ON')
            cursor.close()

    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )

    Base.query = db_session.query_property()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_all():
    """Create every table known to the models package."""
    import stockpos.models  # noqa: F401  (registers mappers on Base)
    Base.metadata.create_all(bind=engine)


def drop_all():
    """Drop every table known to the models package."""
    import stockpos.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def get_session():
    """Get database session."""
    return db_session


def get_engine():
    """Get the SQLAlchemy engine."""
    return engine
