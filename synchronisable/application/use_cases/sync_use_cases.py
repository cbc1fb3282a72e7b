"""
Caso de uso: sincronizar un tipo de entidad contra el almacén local.

Maneja la transacción completa de una corrida:
- commit si la corrida termina (aunque haya errores de registro)
- rollback y re-raise si la corrida aborta (defecto de configuración
  o falla de infraestructura)
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from loguru import logger
from sqlalchemy.orm import sessionmaker

from synchronisable.application.context import RunContext
from synchronisable.application.identity import IdentityLinkage
from synchronisable.application.worker import Worker
from synchronisable.domain.registry import SynchronizerRegistry
from synchronisable.infrastructure.database.session import SessionLocal
from synchronisable.infrastructure.repositories.import_repository import ImportRepository
from synchronisable.infrastructure.repositories.sqlalchemy_store import SqlAlchemyLocalStore


class SyncUseCases:
    """
    Punto de entrada de alto nivel.

    Uso:
        use_cases = SyncUseCases(registry, {"Player": PlayerModel, "Team": TeamModel})
        context = use_cases.sync("Player")
        if context.has_errors:
            ...
    """

    def __init__(
        self,
        registry: SynchronizerRegistry,
        models: Mapping[str, type],
        *,
        session_factory: Optional[sessionmaker] = None,
        logger: Any = None,
        verbose: Optional[bool] = None,
    ):
        self.registry = registry
        self.models = dict(models)
        self.session_factory = session_factory or SessionLocal
        self._logger = logger
        self._verbose = verbose

    def sync(
        self,
        entity_type: str,
        data: Optional[Iterable[Any]] = None,
        *,
        include: Optional[Iterable[str]] = None,
    ) -> RunContext:
        """
        Ejecuta una corrida completa en su propia sesión.
        """
        session = self.session_factory()
        try:
            store = SqlAlchemyLocalStore(session, self.models)
            linkage = IdentityLinkage(store, ImportRepository(session))
            worker = Worker(
                self.registry,
                store,
                linkage,
                logger=self._logger,
                verbose=self._verbose,
            )
            context = worker.run(entity_type, data, include=include)
            session.commit()
            return context
        except Exception as e:
            session.rollback()
            logger.error(f"Sincronización de {entity_type} abortada: {e}")
            raise
        finally:
            session.close()
