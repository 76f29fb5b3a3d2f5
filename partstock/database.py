"""Database configuration and initialization."""
from datetime import timezone

from flask import current_app
from sqlalchemy import BigInteger, DateTime, Integer, TypeDecorator, create_engine
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# SQLite only autoincrements INTEGER PRIMARY KEY columns
Id = BigInteger().with_variant(Integer(), 'sqlite')


def as_utc(moment):
    """Aware UTC datetime; naive values are read as host local time."""
    if moment is None:
        return None
    return moment.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timestamp stored as UTC and loaded as an aware UTC datetime.

    SQLite keeps no offset, so values are written as naive UTC there and
    tagged as UTC again on load.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        value = as_utc(value)
        if value is not None and dialect.name == 'sqlite':
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def make_engine(database_uri, echo=False):
    """Create an engine with pool settings suited to the backend."""
    if database_uri.startswith('sqlite'):
        options = {'connect_args': {'check_same_thread': False}}
        if database_uri in ('sqlite://', 'sqlite:///:memory:'):
            # One shared connection, otherwise every checkout sees an empty database
            options['poolclass'] = StaticPool
        return create_engine(database_uri, echo=echo, **options)

    return create_engine(
        database_uri,
        echo=echo,
        pool_pre_ping=True,  # Enable connection health checks
        pool_size=10,
        max_overflow=20
    )


def make_session_factory(engine):
    """Session factory used by the app and by standalone callers."""
    return sessionmaker(autoflush=False, bind=engine)


def create_schema(engine):
    """Create all tables known to the model registry."""
    import partstock.models  # noqa: F401  (registers mappers)
    Base.metadata.create_all(engine)


def init_db(app):
    """Initialize database connection for a Flask app."""
    engine = make_engine(
        app.config['SQLALCHEMY_DATABASE_URI'],
        echo=app.config.get('SQLALCHEMY_ECHO', False)
    )
    db_session = scoped_session(make_session_factory(engine))

    app.extensions['partstock.engine'] = engine
    app.extensions['partstock.db_session'] = db_session

    if app.config.get('AUTO_CREATE_SCHEMA'):
        create_schema(engine)

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def get_engine():
    """Get the engine bound to the current app."""
    return current_app.extensions['partstock.engine']


def get_session():
    """Get database session for the current app."""
    return current_app.extensions['partstock.db_session']
