"""
Gateways: colaboradores remotos en proceso.

Un gateway expone fetch() y find(id) sobre una fuente de registros
remotos; ambos métodos se pueden pasar directamente como hooks
fetch/find de un Synchronizer.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional


class GatewayBase(ABC):
    """
    Gateway abstracto. Las subclases definen `id_key` y `source()`.

    Cada registro se entrega como copia: el motor extrae el id remoto
    del dict y no debe mutar la fuente.
    """

    id_key: str = "id"

    @abstractmethod
    def source(self) -> Iterable[dict[str, Any]]:
        """Registros remotos disponibles."""

    def fetch(self) -> list[dict[str, Any]]:
        return [dict(record) for record in self.source()]

    def find(self, remote_id: Any) -> Optional[dict[str, Any]]:
        for record in self.source():
            value = record.get(self.id_key)
            if value == remote_id or str(value) == str(remote_id):
                return dict(record)
        return None


class ListGateway(GatewayBase):
    """Gateway sobre una lista fija de registros."""

    def __init__(self, records: Iterable[dict[str, Any]], id_key: str = "id"):
        self._records = [dict(record) for record in records]
        self.id_key = id_key

    def source(self) -> list[dict[str, Any]]:
        return self._records

    def add(self, record: dict[str, Any]) -> None:
        self._records.append(dict(record))

    def remove(self, remote_id: Any) -> None:
        self._records = [
            r for r in self._records if str(r.get(self.id_key)) != str(remote_id)
        ]
