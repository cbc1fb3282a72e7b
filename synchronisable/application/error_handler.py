"""
Contención de errores por registro.

Solo se capturan RecordSyncError (id remoto ausente, validación local,
vínculo no persistido, asociación requerida o registro remoto inexistente).
Cualquier otra excepción es un defecto de configuración o de
infraestructura y se propaga, abortando la corrida.
"""
from typing import Any, Callable

from synchronisable.application.context import RecordFailure, RunContext
from synchronisable.application.sync_unit import SyncUnit
from synchronisable.domain.synchronizer import Association
from synchronisable.shared.exceptions import RecordSyncError


class ErrorHandler:
    def __init__(self, logger: Any, context: RunContext):
        self._logger = logger
        self._context = context

    def handle(self, unit: SyncUnit, action: Callable[[], None]) -> bool:
        """
        Ejecuta el trabajo de un registro.

        Returns:
            True si terminó sin errores de registro, False en caso contrario
        """
        try:
            action()
            return True
        except RecordSyncError as e:
            self._report(
                RecordFailure(
                    entity_type=unit.entity_type,
                    remote_id=unit.remote_id,
                    remote_attrs=unit.remote_attrs,
                    error=e,
                )
            )
            return False

    def handle_association(
        self,
        unit: SyncUnit,
        remote_id: Any,
        association: Association,
        action: Callable[[], None],
    ) -> bool:
        """Igual que handle(), acotado a un item de asociación."""
        try:
            action()
            return True
        except RecordSyncError as e:
            self._report(
                RecordFailure(
                    entity_type=association.target,
                    remote_id=remote_id,
                    remote_attrs=unit.remote_attrs,
                    error=e,
                    association=association.name,
                )
            )
            return False

    def _report(self, failure: RecordFailure) -> None:
        self._context.add_failure(failure)

        where = f" (asociación '{failure.association}')" if failure.association else ""
        log = self._logger
        if hasattr(log, "bind"):
            log = log.bind(
                entity_type=failure.entity_type,
                remote_id=failure.remote_id,
                error_code=failure.error_code,
            )
        log.error(f"{failure.message}{where} | registro remoto: {failure.remote_attrs!r}")
