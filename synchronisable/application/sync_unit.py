"""
Unidad de sincronización: un registro remoto en proceso.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional

from synchronisable.domain.synchronizer import Association, Synchronizer, is_blank
from synchronisable.infrastructure.database.models import ImportModel
from synchronisable.shared.exceptions import (
    ConfigurationError,
    MissingRemoteIdentityError,
    RemoteRecordNotFoundError,
)

if TYPE_CHECKING:
    from synchronisable.application.identity import IdentityLinkage


class SyncUnit:
    """
    Estado de trabajo de un registro remoto.

    - remote_attrs: registro remoto crudo (o un id suelto, ver build)
    - remote_id / local_attrs / associations: resueltos en build()
    - local_record: entidad local; se fija en build() (update) o una
      única vez tras crearla (attach)
    - parent: unidad padre en corridas anidadas (solo trazabilidad y hooks)
    """

    def __init__(
        self,
        synchronizer: Synchronizer,
        remote_attrs: Any,
        parent: Optional["SyncUnit"] = None,
    ):
        self.synchronizer = synchronizer
        self.parent = parent
        self.remote_attrs = dict(remote_attrs) if isinstance(remote_attrs, Mapping) else remote_attrs
        self.remote_id: Any = None
        self.local_attrs: dict[str, Any] = {}
        self.associations: dict[Association, list[Any]] = {}
        self.local_record: Any = None
        self.import_record: Optional[ImportModel] = None
        self._built = False
        self._existing = False

    @property
    def entity_type(self) -> str:
        return self.synchronizer.entity_type

    @property
    def updatable(self) -> bool:
        """True si existe contraparte local (camino update)."""
        return self._existing

    def build(self, linkage: "IdentityLinkage") -> None:
        """
        Resuelve id remoto, atributos locales, asociaciones y contraparte local.

        Si remote_attrs no es un dict se interpreta como id remoto y se
        resuelve vía el hook find del synchronizer.
        """
        if self._built:
            return

        if not isinstance(self.remote_attrs, Mapping):
            if is_blank(self.remote_attrs):
                raise MissingRemoteIdentityError(self.entity_type, self.synchronizer.remote_id)
            self.remote_attrs = self._find_remote(self.remote_attrs)

        attrs = dict(self.remote_attrs)
        self.remote_id = self.synchronizer.extract_remote_id(attrs)
        self.associations = self.synchronizer.associations_for(attrs)
        # Un campo de asociación mapeado explícitamente también es atributo local (FK)
        for association in self.synchronizer.associations:
            if self.synchronizer.mappings.get(association.key) is None:
                attrs.pop(association.key, None)
        self.local_attrs = self.synchronizer.map_attributes(attrs)

        linked = linkage.resolve(self.entity_type, self.remote_id)
        if linked is not None:
            self.local_record = linked.entity
            self.import_record = linked.import_record
            self._existing = True

        self._built = True

    def attach(self, local_record: Any) -> None:
        """Fija la entidad recién creada (una sola vez)."""
        if self.local_record is not None:
            raise RuntimeError(f"{self.entity_type}: la unidad ya tiene entidad local")
        self.local_record = local_record

    def ancestors(self) -> Iterator["SyncUnit"]:
        unit = self.parent
        while unit is not None:
            yield unit
            unit = unit.parent

    def references(self, entity_type: str, remote_id: Any) -> bool:
        """True si esta unidad o algún ancestro corresponde a (tipo, id remoto)."""
        for unit in (self, *self.ancestors()):
            if unit.entity_type == entity_type and str(unit.remote_id) == str(remote_id):
                return True
        return False

    def dump_message(self) -> str:
        associations = {a.name: ids for a, ids in self.associations.items()}
        lines = [
            f"{self.entity_type} remote id: {self.remote_id!r}",
            f"  remote attrs: {self.remote_attrs!r}",
            f"  local attrs: {self.local_attrs!r}",
            f"  associations: {associations!r}",
            f"  existing local record: {'yes' if self.updatable else 'no'}",
        ]
        if self.parent is not None:
            lines.append(f"  parent: {self.parent.entity_type} {self.parent.remote_id!r}")
        return "\n".join(lines)

    def _find_remote(self, remote_id: Any) -> dict[str, Any]:
        if self.synchronizer.find is None:
            raise ConfigurationError(
                f"{self.entity_type}: batch de ids sin hook find para resolverlos",
                details={"entity": self.entity_type},
            )
        record = self.synchronizer.find(remote_id)
        if is_blank(record):
            raise RemoteRecordNotFoundError(self.entity_type, remote_id)
        return dict(record)

    def __repr__(self) -> str:
        return f"<SyncUnit({self.entity_type}, remote_id={self.remote_id!r})>"
