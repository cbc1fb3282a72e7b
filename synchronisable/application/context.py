"""
Contexto de una corrida de sincronización: contadores y resumen.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from synchronisable.shared.exceptions import RecordSyncError


@dataclass
class RecordFailure:
    """Error fatal de un registro (o de un item de asociación)."""

    entity_type: str
    remote_id: Any
    remote_attrs: Any
    error: RecordSyncError
    association: Optional[str] = None

    @property
    def error_code(self) -> str:
        return self.error.error_code

    @property
    def message(self) -> str:
        return self.error.message


@dataclass
class InconsistentEntity:
    """Entidad creada localmente que no pudo vincularse a su id remoto."""

    entity_type: str
    local_id: Any
    remote_id: Any


@dataclass
class RunContext:
    """
    Contadores de una corrida del Worker para un tipo de entidad.

    before/after: cantidad de entidades locales del tipo al abrir/cerrar.
    La corrida nunca levanta errores de registro: quien necesite éxito
    estricto debe consultar has_errors.
    """

    entity_type: str
    parent_type: Optional[str] = None
    before: int = 0
    after: int = 0
    deleted: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failures: list[RecordFailure] = field(default_factory=list)
    inconsistent: list[InconsistentEntity] = field(default_factory=list)
    children: list["RunContext"] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def has_errors(self) -> bool:
        """True si esta corrida o alguna corrida anidada tuvo errores."""
        return bool(self.failures) or any(child.has_errors for child in self.children)

    def add_failure(self, failure: RecordFailure) -> None:
        self.failures.append(failure)

    def mark_inconsistent(self, entity_type: str, local_id: Any, remote_id: Any) -> None:
        self.inconsistent.append(InconsistentEntity(entity_type, local_id, remote_id))

    def all_failures(self) -> list[RecordFailure]:
        """Errores de esta corrida y de todas las anidadas, en orden."""
        result = list(self.failures)
        for child in self.children:
            result.extend(child.all_failures())
        return result

    def summary_message(self) -> str:
        parent = f" (padre: {self.parent_type})" if self.parent_type else ""
        msg = (
            f"{self.entity_type} synchronization summary{parent}: "
            f"before={self.before}, after={self.after}, deleted={self.deleted}, "
            f"created={self.created}, updated={self.updated}, "
            f"skipped={self.skipped}, errors={self.failed}"
        )
        if self.inconsistent:
            msg += f", inconsistent={len(self.inconsistent)}"
        return msg
