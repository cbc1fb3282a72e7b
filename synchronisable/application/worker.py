"""
Worker: orquestador de una corrida de sincronización.

Flujo por corrida (un tipo de entidad):
- Abre el RunContext (cantidad local "before")
- Obtiene el batch vía fetch si no se pasó data
- Por cada registro, en orden y dentro del ErrorHandler:
  build -> before_sync -> record sync -> association sync -> after_sync
- Cada asociación dispara una corrida anidada con un batch de un registro
- Aplica destroy_missing (solo corridas de primer nivel) y cierra el contexto

Todo es sincrónico: un registro (con todas sus corridas anidadas) termina
antes de que empiece el siguiente.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

from loguru import logger as default_logger

from synchronisable.application.context import RunContext
from synchronisable.application.error_handler import ErrorHandler
from synchronisable.application.identity import IdentityLinkage
from synchronisable.application.sync_unit import SyncUnit
from synchronisable.core.config import settings
from synchronisable.domain.registry import SynchronizerRegistry
from synchronisable.domain.repositories.local_store import LocalStore
from synchronisable.domain.synchronizer import Association, Synchronizer, is_blank
from synchronisable.shared.exceptions import (
    LinkagePersistError,
    RemoteRecordNotFoundError,
    UnresolvedAssociationError,
)


class Worker:
    """
    Responsable de sincronizar un tipo de entidad y, recursivamente,
    sus asociaciones.
    """

    def __init__(
        self,
        registry: SynchronizerRegistry,
        store: LocalStore,
        linkage: IdentityLinkage,
        *,
        logger: Any = None,
        verbose: Optional[bool] = None,
    ):
        self._registry = registry
        self._store = store
        self._linkage = linkage
        self._logger = logger or default_logger
        self._verbose = settings.SYNC_VERBOSE_LOGGING if verbose is None else verbose

    def run(
        self,
        entity_type: str,
        data: Optional[Iterable[Any]] = None,
        *,
        include: Optional[Iterable[str]] = None,
        parent: Optional[SyncUnit] = None,
    ) -> RunContext:
        """
        Ejecuta una corrida para entity_type.

        Args:
            entity_type: tipo de entidad registrado
            data: registros remotos (dicts) o ids remotos. Vacio -> hook fetch
            include: subconjunto de asociaciones a recorrer (por defecto todas)
            parent: unidad padre (corridas anidadas)

        Returns:
            RunContext con los contadores de la corrida

        Raises:
            ConfigurationError: ante defectos de configuración (aborta la corrida)
        """
        synchronizer = self._registry.get(entity_type)
        if parent is None:
            self._registry.validate()
        associations = self._included_associations(synchronizer, include)

        log = self._bind(synchronizer.logger or self._logger, f"{entity_type} synchronization")
        log.info("starting")

        context = RunContext(entity_type, parent.entity_type if parent else None)
        context.before = self._store.count(entity_type)
        error_handler = ErrorHandler(log, context)

        batch = list(data) if data is not None else []
        if not batch:
            batch = synchronizer.fetch_data()
        for item in batch:
            unit = SyncUnit(synchronizer, item, parent=parent)
            error_handler.handle(
                unit,
                lambda: self._sync_unit(unit, context, error_handler, associations, log),
            )

        if synchronizer.destroy_missing and parent is None:
            present = [synchronizer.peek_remote_id(item) for item in batch]
            context.deleted = self._linkage.destroy_missing(
                entity_type, [remote_id for remote_id in present if remote_id is not None]
            )

        context.after = self._store.count(entity_type)

        log.info("done")
        log.info(context.summary_message())
        return context

    def _sync_unit(
        self,
        unit: SyncUnit,
        context: RunContext,
        error_handler: ErrorHandler,
        associations: tuple[Association, ...],
        log: Any,
    ) -> None:
        unit.build(self._linkage)
        if self._verbose:
            log.info(unit.dump_message())

        def sync() -> None:
            if self._sync_record(unit, context, log):
                self._sync_associations(unit, context, error_handler, associations, log)

        if not unit.synchronizer.with_callbacks("sync", sync, unit):
            context.skipped += 1
            if self._verbose:
                log.debug(f"before_sync canceló {unit!r}")

    def _sync_record(self, unit: SyncUnit, context: RunContext, log: Any) -> bool:
        """
        Crea o actualiza la entidad local del registro.

        Returns:
            False si before_record_sync canceló el registro
        """

        def sync_record() -> None:
            if unit.updatable:
                self._update_record(unit, context, log)
            else:
                self._create_record_pair(unit, context, log)

        synced = unit.synchronizer.with_callbacks("record_sync", sync_record, unit)
        if not synced:
            context.skipped += 1
            if self._verbose:
                log.debug(f"before_record_sync canceló {unit!r}")
        return synced

    def _update_record(self, unit: SyncUnit, context: RunContext, log: Any) -> None:
        if self._verbose:
            log.info(f"updating {unit.entity_type}: {unit.import_record.synchronizable_id}")

        self._store.update(unit.entity_type, unit.local_record, unit.local_attrs)
        self._linkage.refresh(unit.import_record, unit.local_attrs)
        context.updated += 1

    def _create_record_pair(self, unit: SyncUnit, context: RunContext, log: Any) -> None:
        local_record = self._store.create(unit.entity_type, unit.local_attrs)
        unit.attach(local_record)
        context.created += 1
        local_id = self._store.identity_of(local_record)

        try:
            unit.import_record = self._linkage.link(
                unit.entity_type, local_id, unit.remote_id, unit.local_attrs
            )
        except LinkagePersistError:
            context.mark_inconsistent(unit.entity_type, local_id, unit.remote_id)
            raise

        if self._verbose:
            log.info(f"{unit.entity_type}: {local_id} was created")
            log.info(f"Import: {unit.import_record.id} was created")

    def _sync_associations(
        self,
        unit: SyncUnit,
        context: RunContext,
        error_handler: ErrorHandler,
        associations: tuple[Association, ...],
        log: Any,
    ) -> None:
        if self._verbose and any(unit.associations.values()):
            log.info("starting associations sync")

        for association, ids in unit.associations.items():
            if association not in associations:
                continue
            target = self._registry.target_of(unit.entity_type, association)
            for remote_id in ids:
                error_handler.handle_association(
                    unit,
                    remote_id,
                    association,
                    lambda: self._sync_association(unit, remote_id, association, target, context, log),
                )

    def _sync_association(
        self,
        unit: SyncUnit,
        remote_id: Any,
        association: Association,
        target: Synchronizer,
        context: RunContext,
        log: Any,
    ) -> None:
        if unit.references(target.entity_type, remote_id):
            log.warning(
                f"Ciclo de asociaciones: {target.entity_type} {remote_id!r} ya está en "
                f"sincronización en esta cadena ({unit.entity_type}.{association.name}); se omite"
            )
            return

        if self._verbose:
            log.info(f"synchronizing association {association.name} with id: {remote_id!r}")

        def sync_association() -> None:
            if target.find is None:
                raise UnresolvedAssociationError(
                    unit.entity_type, association.name, f"'{target.entity_type}' no define el hook find"
                )
            attrs = target.find(remote_id)
            if is_blank(attrs):
                raise RemoteRecordNotFoundError(target.entity_type, remote_id)
            context.children.append(self.run(target.entity_type, [attrs], parent=unit))

        if not unit.synchronizer.with_callbacks("association_sync", sync_association, unit, remote_id, association):
            context.skipped += 1
            if self._verbose:
                log.debug(f"before_association_sync canceló {association.name} {remote_id!r}")

    def _included_associations(
        self,
        synchronizer: Synchronizer,
        include: Optional[Iterable[str]],
    ) -> tuple[Association, ...]:
        if include is None:
            return synchronizer.associations

        selected = []
        for name in include:
            association = synchronizer.association(name)
            if association is None:
                raise UnresolvedAssociationError(
                    synchronizer.entity_type, name, "asociación no declarada (include)"
                )
            selected.append(association)
        return tuple(selected)

    @staticmethod
    def _bind(log: Any, name: str) -> Any:
        return log.bind(sync=name) if hasattr(log, "bind") else log
