"""
Gestion de engine y sesiones de base de datos.
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from synchronisable.core.config import normalize_database_url, settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args(url: str, echo: bool) -> dict:
    """
    Construye los argumentos del engine según el tipo de base de datos.
    PostgreSQL usa pool de conexiones; SQLite en memoria usa una sola conexion.
    """
    args: dict = {"echo": echo, "future": True}

    if url.startswith("sqlite"):
        args["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            args["poolclass"] = StaticPool
    else:
        args["pool_pre_ping"] = True  # Verifica conexion antes de usar

    return args


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """
    pysqlite emite BEGIN por su cuenta y rompe los SAVEPOINT.
    Se desactiva ese comportamiento y SQLAlchemy emite BEGIN explícitamente.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Crea un engine para la URL dada (por defecto settings.DATABASE_URL).
    """
    url = normalize_database_url(url or settings.DATABASE_URL)
    echo = settings.DB_ECHO if echo is None else echo

    engine = create_engine(url, **_create_engine_args(url, echo))
    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


# Engine y session factory por defecto (lazy: no conecta hasta el primer uso)
engine = build_engine()
SessionLocal = build_session_factory(engine)


@contextmanager
def get_session(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """
    Sesión transaccional: commit al salir, rollback ante cualquier excepción.
    """
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Crea todas las tablas registradas en Base."""
    # Registra ImportModel en Base.metadata
    from synchronisable.infrastructure.database import models  # noqa: F401

    Base.metadata.create_all(bind or engine)


def close_db(bind: Optional[Engine] = None) -> None:
    """Cierra las conexiones de la base de datos."""
    (bind or engine).dispose()
