"""
Configuración de fixtures para pytest.
"""
import pytest
from loguru import logger
from sqlalchemy import Boolean, Column, Integer, String

from synchronisable.application.identity import IdentityLinkage
from synchronisable.application.worker import Worker
from synchronisable.domain.registry import SynchronizerRegistry
from synchronisable.infrastructure.database.models import ImportModel  # noqa: F401
from synchronisable.infrastructure.database.session import (
    Base,
    build_engine,
    build_session_factory,
)
from synchronisable.infrastructure.repositories.import_repository import ImportRepository
from synchronisable.infrastructure.repositories.sqlalchemy_store import SqlAlchemyLocalStore


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite://"


class TournamentModel(Base):
    __tablename__ = "test_tournaments"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    is_current = Column(Boolean, default=False)


class StageModel(Base):
    __tablename__ = "test_stages"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    number = Column(Integer, nullable=True)


class MatchModel(Base):
    __tablename__ = "test_matches"

    id = Column(Integer, primary_key=True)
    home = Column(String(255), nullable=True)
    away = Column(String(255), nullable=True)


class TeamModel(Base):
    __tablename__ = "test_teams"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    country = Column(String(255), nullable=True)


class PlayerModel(Base):
    __tablename__ = "test_players"

    id = Column(Integer, primary_key=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=True)
    height = Column(Integer, nullable=True)
    team_id = Column(String(255), nullable=True)


MODELS = {
    "Tournament": TournamentModel,
    "Stage": StageModel,
    "Match": MatchModel,
    "Team": TeamModel,
    "Player": PlayerModel,
}


@pytest.fixture(scope="function")
def engine():
    """Engine SQLite en memoria, con tablas creadas, por cada test."""
    engine = build_engine(TEST_DATABASE_URL, echo=False)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def models():
    """Tipo de entidad -> modelo ORM de prueba."""
    return dict(MODELS)


@pytest.fixture
def store(db_session, models):
    return SqlAlchemyLocalStore(db_session, models)


@pytest.fixture
def imports(db_session):
    return ImportRepository(db_session)


@pytest.fixture
def linkage(store, imports):
    return IdentityLinkage(store, imports)


@pytest.fixture
def make_worker(store, linkage):
    """Construye un Worker sobre un registro con los synchronizers dados."""

    def _make(*synchronizers, **kwargs):
        return Worker(SynchronizerRegistry(synchronizers), store, linkage, **kwargs)

    return _make


@pytest.fixture
def log_records():
    """Captura los registros de loguru emitidos durante el test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
