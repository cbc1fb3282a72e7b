"""
Almacen local sobre modelos ORM de SQLAlchemy.
"""
from typing import Any, Mapping, Optional

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import DataError, IntegrityError, StatementError
from sqlalchemy.orm import Session

from synchronisable.domain.repositories.local_store import LocalStore
from synchronisable.shared.exceptions import RecordValidationError, UnknownEntityTypeError


class SqlAlchemyLocalStore(LocalStore):
    """
    LocalStore que resuelve cada tipo de entidad a un modelo ORM.

    Cada escritura corre en su propio SAVEPOINT: un registro rechazado
    se revierte sin afectar al resto del batch.
    """

    def __init__(self, db: Session, models: Mapping[str, type]):
        self.db = db
        self._models = dict(models)

    def model_for(self, entity_type: str) -> type:
        try:
            return self._models[entity_type]
        except KeyError:
            raise UnknownEntityTypeError(entity_type) from None

    def create(self, entity_type: str, attrs: dict[str, Any]) -> Any:
        model = self.model_for(entity_type)
        self._check_columns(entity_type, model, attrs)

        entity = model(**attrs)
        try:
            with self.db.begin_nested():
                self.db.add(entity)
        except (IntegrityError, DataError, StatementError) as e:
            raise RecordValidationError(entity_type, _reason(e), attrs) from e
        return entity

    def update(self, entity_type: str, entity: Any, attrs: dict[str, Any]) -> None:
        model = self.model_for(entity_type)
        self._check_columns(entity_type, model, attrs)

        try:
            with self.db.begin_nested():
                for key, value in attrs.items():
                    setattr(entity, key, value)
        except (IntegrityError, DataError, StatementError) as e:
            raise RecordValidationError(entity_type, _reason(e), attrs) from e

    def delete(self, entity_type: str, entity: Any) -> None:
        with self.db.begin_nested():
            self.db.delete(entity)

    def get(self, entity_type: str, local_id: Any) -> Optional[Any]:
        model = self.model_for(entity_type)
        pk_column = inspect(model).primary_key[0]
        try:
            local_id = pk_column.type.python_type(local_id)
        except NotImplementedError:
            pass
        return self.db.get(model, local_id)

    def count(self, entity_type: str) -> int:
        model = self.model_for(entity_type)
        return int(self.db.execute(select(func.count()).select_from(model)).scalar_one())

    def identity_of(self, entity: Any) -> Any:
        return inspect(entity).identity[0]

    @staticmethod
    def _check_columns(entity_type: str, model: type, attrs: Mapping[str, Any]) -> None:
        columns = {attr.key for attr in inspect(model).column_attrs}
        unknown = sorted(str(key) for key in attrs if key not in columns)
        if unknown:
            raise RecordValidationError(
                entity_type, f"atributos desconocidos: {', '.join(unknown)}", dict(attrs)
            )


def _reason(error: Exception) -> str:
    orig = getattr(error, "orig", None)
    return str(orig or error).splitlines()[0]
