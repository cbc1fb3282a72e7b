"""
Resolución de identidades remotas contra el almacén local.

Decide si un registro remoto ya tiene contraparte local (update) o no
(create), y mantiene la tabla de vínculos en sincronia con las entidades.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from loguru import logger

from synchronisable.domain.repositories.local_store import LocalStore
from synchronisable.infrastructure.database.models import ImportModel
from synchronisable.infrastructure.repositories.import_repository import ImportRepository


@dataclass(frozen=True)
class LinkedEntity:
    """Entidad local encontrada junto a su fila de vínculo."""

    entity: Any
    import_record: ImportModel


class IdentityLinkage:
    """
    Fuente de verdad de "existe ya una contraparte local".
    """

    def __init__(self, store: LocalStore, imports: ImportRepository):
        self.store = store
        self.imports = imports

    def resolve(self, entity_type: str, remote_id: Any) -> Optional[LinkedEntity]:
        """
        Busca la entidad local vinculada al id remoto.

        Un vínculo cuya entidad ya no existe se considera obsoleto:
        se elimina y se retorna None (camino de creación).
        """
        record = self.imports.find_by_remote_id(entity_type, remote_id)
        if record is None:
            return None

        entity = self.store.get(entity_type, record.synchronizable_id)
        if entity is None:
            logger.warning(
                f"{entity_type}: vínculo obsoleto para id remoto {remote_id!r} "
                f"(entidad local {record.synchronizable_id} no existe); se recrea"
            )
            self.imports.delete(record)
            return None

        return LinkedEntity(entity=entity, import_record=record)

    def link(
        self,
        entity_type: str,
        local_id: Any,
        remote_id: Any,
        attrs: dict[str, Any],
    ) -> ImportModel:
        """
        Crea el vínculo de una entidad recién creada.

        Raises:
            LinkagePersistError: si la fila no pudo persistirse
        """
        return self.imports.create(entity_type, local_id, remote_id, attrs)

    def refresh(self, record: ImportModel, attrs: dict[str, Any]) -> None:
        self.imports.refresh(record, attrs)

    def destroy_missing(self, entity_type: str, present_remote_ids: Iterable[Any]) -> int:
        """
        Elimina las entidades locales cuyo id remoto no vino en el batch,
        junto con sus vínculos.

        Returns:
            Cantidad de entidades locales eliminadas
        """
        deleted = 0
        for record in self.imports.missing_for(entity_type, present_remote_ids):
            entity = self.store.get(entity_type, record.synchronizable_id)
            if entity is not None:
                self.store.delete(entity_type, entity)
                deleted += 1
            self.imports.delete(record)
        return deleted
