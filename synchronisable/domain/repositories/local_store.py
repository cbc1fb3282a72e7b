"""
Interfaz del almacén local de entidades.

Define el contrato que el Worker consume, sin depender de la
implementación concreta (SQLAlchemy, memoria, etc).
"""
from abc import ABC, abstractmethod
from typing import Any, Optional


class LocalStore(ABC):
    """
    Almacen local, indexado por tipo de entidad.

    Las implementaciones deben levantar RecordValidationError cuando
    rechazan los atributos de un registro.
    """

    @abstractmethod
    def create(self, entity_type: str, attrs: dict[str, Any]) -> Any:
        """Crea la entidad y la retorna con su id asignado."""

    @abstractmethod
    def update(self, entity_type: str, entity: Any, attrs: dict[str, Any]) -> None:
        """Reemplaza todos los campos presentes en attrs."""

    @abstractmethod
    def delete(self, entity_type: str, entity: Any) -> None:
        pass

    @abstractmethod
    def get(self, entity_type: str, local_id: Any) -> Optional[Any]:
        pass

    @abstractmethod
    def count(self, entity_type: str) -> int:
        pass

    def identity_of(self, entity: Any) -> Any:
        """Id local de una entidad."""
        return entity.id
