"""
Registro de synchronizers por tipo de entidad.

Se construye una vez en el startup y se pasa explícitamente al Worker.
"""
from __future__ import annotations

from typing import Iterable, Iterator, Optional

from synchronisable.domain.synchronizer import Association, Synchronizer
from synchronisable.shared.exceptions import (
    InvalidMappingError,
    UnknownEntityTypeError,
    UnresolvedAssociationError,
)


class SynchronizerRegistry:
    """
    Mapeo tipo de entidad -> Synchronizer.

    validate() resuelve todas las asociaciones declaradas contra los tipos
    registrados; un destino desconocido es un defecto de configuración.
    """

    def __init__(self, synchronizers: Optional[Iterable[Synchronizer]] = None):
        self._synchronizers: dict[str, Synchronizer] = {}
        for synchronizer in synchronizers or ():
            self.register(synchronizer)

    def register(self, synchronizer: Synchronizer) -> None:
        """
        Registra un synchronizer.

        Raises:
            InvalidMappingError: si el tipo de entidad ya estaba registrado
        """
        if synchronizer.entity_type in self._synchronizers:
            raise InvalidMappingError(synchronizer.entity_type, "synchronizer registrado dos veces")
        self._synchronizers[synchronizer.entity_type] = synchronizer

    def get(self, entity_type: str) -> Synchronizer:
        try:
            return self._synchronizers[entity_type]
        except KeyError:
            raise UnknownEntityTypeError(entity_type) from None

    def target_of(self, entity_type: str, association: Association) -> Synchronizer:
        """Synchronizer destino de una asociación."""
        target = self._synchronizers.get(association.target)
        if target is None:
            raise UnresolvedAssociationError(
                entity_type,
                association.name,
                f"tipo destino '{association.target}' no registrado",
            )
        return target

    def validate(self) -> None:
        """
        Verifica que todas las asociaciones apunten a tipos registrados
        con hook find (necesario para recorrerlas).
        """
        for synchronizer in self._synchronizers.values():
            for association in synchronizer.associations:
                target = self.target_of(synchronizer.entity_type, association)
                if target.find is None:
                    raise UnresolvedAssociationError(
                        synchronizer.entity_type,
                        association.name,
                        f"'{target.entity_type}' no define el hook find",
                    )

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._synchronizers

    def __iter__(self) -> Iterator[Synchronizer]:
        return iter(self._synchronizers.values())

    def __len__(self) -> int:
        return len(self._synchronizers)
