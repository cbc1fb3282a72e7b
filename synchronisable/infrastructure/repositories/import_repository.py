"""
Repositorio del vínculo de identidades (tabla imports).
"""
import json
from typing import Any, Iterable, Optional

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from synchronisable.infrastructure.database.models import ImportModel
from synchronisable.shared.exceptions import LinkagePersistError


def _snapshot(attrs: dict[str, Any]) -> dict[str, Any]:
    """Copia JSON-serializable de los atributos (fechas, decimales -> str)."""
    return json.loads(json.dumps(attrs, default=str))


class ImportRepository:
    """
    Gestiona la tabla imports.

    Lecturas por (tipo, id remoto) para decidir create vs update;
    escrituras dentro de SAVEPOINT para no invalidar la sesión.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_remote_id(self, entity_type: str, remote_id: Any) -> Optional[ImportModel]:
        query = select(ImportModel).where(
            ImportModel.synchronizable_type == entity_type,
            ImportModel.remote_id == str(remote_id),
        )
        return self.db.execute(query).scalar_one_or_none()

    def find_by_local_id(self, entity_type: str, local_id: Any) -> Optional[ImportModel]:
        query = select(ImportModel).where(
            ImportModel.synchronizable_type == entity_type,
            ImportModel.synchronizable_id == str(local_id),
        )
        return self.db.execute(query).scalar_one_or_none()

    def create(
        self,
        entity_type: str,
        local_id: Any,
        remote_id: Any,
        attrs: dict[str, Any],
    ) -> ImportModel:
        """
        Crea el vínculo para una entidad recién creada.

        Raises:
            LinkagePersistError: si la fila no pudo persistirse
        """
        record = ImportModel(
            synchronizable_type=entity_type,
            synchronizable_id=str(local_id),
            remote_id=str(remote_id),
            attrs=_snapshot(attrs),
        )
        try:
            with self.db.begin_nested():
                self.db.add(record)
        except SQLAlchemyError as e:
            raise LinkagePersistError(entity_type, local_id, remote_id, str(e).splitlines()[0]) from e
        return record

    def refresh(self, record: ImportModel, attrs: dict[str, Any]) -> None:
        """Actualiza el snapshot de atributos tras re-sincronizar."""
        with self.db.begin_nested():
            record.attrs = _snapshot(attrs)

    def delete(self, record: ImportModel) -> None:
        with self.db.begin_nested():
            self.db.delete(record)
        logger.debug(f"Vínculo eliminado: {record!r}")

    def missing_for(self, entity_type: str, present_remote_ids: Iterable[Any]) -> list[ImportModel]:
        """Vínculos del tipo cuyo id remoto no está en present_remote_ids."""
        present = {str(remote_id) for remote_id in present_remote_ids}
        query = (
            select(ImportModel)
            .where(ImportModel.synchronizable_type == entity_type)
            .order_by(ImportModel.id)
        )
        return [r for r in self.db.execute(query).scalars().all() if r.remote_id not in present]

    def count(self, entity_type: str) -> int:
        query = select(func.count(ImportModel.id)).where(
            ImportModel.synchronizable_type == entity_type
        )
        return int(self.db.execute(query).scalar_one())
