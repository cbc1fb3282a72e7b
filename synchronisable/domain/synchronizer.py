"""
Configuración de sincronización por tipo de entidad.

Define:
- Association: descriptor estático de una asociación anidada
- Synchronizer: reglas inmutables (id remoto, mapeos, only/except,
  defaults, destroy_missing, asociaciones, fetch/find y hooks)
- SynchronizerBuilder: construye y valida un Synchronizer en el startup

Este modulo no realiza I/O: solo define configuración y transformaciones puras.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from synchronisable.shared.exceptions import (
    InvalidMappingError,
    MissingAssociationError,
    MissingRemoteIdentityError,
)

Hook = Callable[..., Optional[bool]]
FetchHook = Callable[[], Optional[Iterable[Any]]]
FindHook = Callable[[Any], Optional[Mapping[str, Any]]]

DEFAULT_REMOTE_ID = "id"

# Etapas con par before_/after_
CALLBACK_STAGES = ("sync", "record_sync", "association_sync")
HOOK_NAMES = tuple(
    f"{prefix}_{stage}" for stage in CALLBACK_STAGES for prefix in ("before", "after")
)


def is_blank(value: Any) -> bool:
    """None, strings vacíos y colecciones vacías se consideran ausentes."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def _singularize(name: str) -> str:
    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith(("ches", "shes", "sses", "xes", "zes")):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


@dataclass(frozen=True)
class Association:
    """
    Asociación de un tipo de entidad hacia otro.

    - name: nombre de la asociación (p.ej. "team", "matches")
    - target: tipo de entidad destino (debe estar registrado)
    - key: campo del registro remoto con la(s) identidad(es) remota(s)
    - many: has_many (lista de ids) vs has_one (un id)
    - required: si True, la ausencia del campo es fatal para el registro
    """

    name: str
    target: str
    key: str
    many: bool = False
    required: bool = False

    def extract(self, remote_attrs: Mapping[str, Any]) -> list[Any]:
        """Ids remotos referenciados, en el orden del registro fuente."""
        value = remote_attrs.get(self.key)
        if is_blank(value):
            return []
        if self.many and isinstance(value, (list, tuple)):
            return [v for v in value if not is_blank(v)]
        return [value]


@dataclass(frozen=True)
class Synchronizer:
    """
    Configuración de sincronización de un tipo de entidad local.
    Inmutable: se construye una vez con SynchronizerBuilder.
    """

    entity_type: str
    remote_id: str = DEFAULT_REMOTE_ID
    mappings: Mapping[Any, Optional[str]] = field(default_factory=lambda: MappingProxyType({}))
    only: frozenset = frozenset()
    except_: frozenset = frozenset()
    defaults: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    destroy_missing: bool = False
    associations: tuple[Association, ...] = ()
    fetch: Optional[FetchHook] = None
    find: Optional[FindHook] = None
    before_sync: Optional[Hook] = None
    after_sync: Optional[Hook] = None
    before_record_sync: Optional[Hook] = None
    after_record_sync: Optional[Hook] = None
    before_association_sync: Optional[Hook] = None
    after_association_sync: Optional[Hook] = None
    logger: Any = None

    def extract_remote_id(self, attrs: dict[str, Any]) -> Any:
        """
        Remueve y retorna el id remoto del dict de atributos.

        Raises:
            MissingRemoteIdentityError: si el id no viene o está vacío
        """
        remote_id = attrs.pop(self.remote_id, None)
        if is_blank(remote_id):
            raise MissingRemoteIdentityError(self.entity_type, self.remote_id)
        return remote_id

    def peek_remote_id(self, item: Any) -> Any:
        """Id remoto de un item del batch sin modificarlo (None si no viene)."""
        if isinstance(item, Mapping):
            value = item.get(self.remote_id)
            return None if is_blank(value) else value
        return None if is_blank(item) else item

    def map_attributes(self, attrs: Mapping[Any, Any]) -> dict[Any, Any]:
        """
        Mapea atributos remotos a atributos locales.

        Orden fijo: renombrado -> only -> except (incluye la clave None,
        que representa "sin destino") -> defaults para claves ausentes.
        """
        result = {self.mappings.get(key, key): value for key, value in attrs.items()}
        if self.only:
            result = {key: value for key, value in result.items() if key in self.only}
        result = {
            key: value
            for key, value in result.items()
            if key is not None and key not in self.except_
        }
        for key, value in self.defaults.items():
            if key not in result and key not in self.except_:
                result[key] = value
        return result

    def associations_for(self, remote_attrs: Mapping[str, Any]) -> dict[Association, list[Any]]:
        """
        Extrae los ids remotos de cada asociación declarada.

        Raises:
            MissingAssociationError: si una asociación requerida viene vacía
        """
        result: dict[Association, list[Any]] = {}
        for association in self.associations:
            ids = association.extract(remote_attrs)
            if association.required and not ids:
                raise MissingAssociationError(self.entity_type, association.name, association.key)
            result[association] = ids
        return result

    def association(self, name: str) -> Optional[Association]:
        for association in self.associations:
            if association.name == name:
                return association
        return None

    def fetch_data(self) -> list[Any]:
        """Batch remoto vía el hook fetch (lista vacía si no hay hook)."""
        if self.fetch is None:
            return []
        return list(self.fetch() or [])

    def with_callbacks(self, stage: str, action: Callable[[], None], *args: Any) -> bool:
        """
        Ejecuta action envuelta en before_<stage>/after_<stage>.

        Returns:
            False si before_<stage> retornó False explícitamente (action no corre)
        """
        before = getattr(self, f"before_{stage}")
        after = getattr(self, f"after_{stage}")

        if before is not None and before(*args) is False:
            return False
        action()
        if after is not None:
            after(*args)
        return True


class SynchronizerBuilder:
    """
    Builder de Synchronizer.

    Uso:
        players = (
            SynchronizerBuilder("Player")
            .remote_id("player_id")
            .mappings({"eman_tsrif": "first_name", "team": "team_id"})
            .only("first_name", "team_id")
            .has_one("team", target="Team", key="team")
            .fetch(gateway.fetch)
            .find(gateway.find)
            .build()
        )

    El campo fuente de una asociación no llega al almacén local, salvo que
    esté mapeado en mappings (arriba "team" -> "team_id" guarda el id remoto
    del equipo en la columna team_id).
    """

    def __init__(self, entity_type: str):
        self._entity_type = entity_type
        self._remote_id: Any = DEFAULT_REMOTE_ID
        self._mappings: dict[Any, Any] = {}
        self._only: list[Any] = []
        self._except: list[Any] = []
        self._defaults: dict[Any, Any] = {}
        self._destroy_missing = False
        self._associations: list[Association] = []
        self._fetch: Optional[FetchHook] = None
        self._find: Optional[FindHook] = None
        self._hooks: dict[str, Hook] = {}
        self._logger: Any = None

    def remote_id(self, name: str) -> "SynchronizerBuilder":
        self._remote_id = name
        return self

    def mappings(self, mappings: Mapping[Any, Any]) -> "SynchronizerBuilder":
        self._mappings.update(mappings)
        return self

    def only(self, *fields: Any) -> "SynchronizerBuilder":
        self._only.extend(fields)
        return self

    def except_(self, *fields: Any) -> "SynchronizerBuilder":
        self._except.extend(fields)
        return self

    def defaults(self, **values: Any) -> "SynchronizerBuilder":
        self._defaults.update(values)
        return self

    def destroy_missing(self, value: bool = True) -> "SynchronizerBuilder":
        self._destroy_missing = value
        return self

    def has_one(
        self,
        name: str,
        *,
        target: str,
        key: Optional[str] = None,
        required: bool = False,
    ) -> "SynchronizerBuilder":
        self._associations.append(
            Association(name=name, target=target, key=key or f"{name}_id", required=required)
        )
        return self

    def has_many(
        self,
        name: str,
        *,
        target: str,
        key: Optional[str] = None,
        required: bool = False,
    ) -> "SynchronizerBuilder":
        self._associations.append(
            Association(
                name=name,
                target=target,
                key=key or f"{_singularize(name)}_ids",
                many=True,
                required=required,
            )
        )
        return self

    def fetch(self, fn: FetchHook) -> "SynchronizerBuilder":
        self._fetch = fn
        return self

    def find(self, fn: FindHook) -> "SynchronizerBuilder":
        self._find = fn
        return self

    def hooks(self, **hooks: Hook) -> "SynchronizerBuilder":
        """Registra hooks de ciclo de vida (before_sync=..., after_record_sync=..., ...)."""
        self._hooks.update(hooks)
        return self

    def logger(self, logger: Any) -> "SynchronizerBuilder":
        self._logger = logger
        return self

    def build(self) -> Synchronizer:
        """
        Valida y construye el Synchronizer.

        Raises:
            InvalidMappingError: ante cualquier configuración mal formada
        """
        self._validate()
        return Synchronizer(
            entity_type=self._entity_type,
            remote_id=self._remote_id,
            mappings=MappingProxyType(dict(self._mappings)),
            only=frozenset(self._only),
            except_=frozenset(self._except),
            defaults=MappingProxyType(dict(self._defaults)),
            destroy_missing=bool(self._destroy_missing),
            associations=tuple(self._associations),
            fetch=self._fetch,
            find=self._find,
            logger=self._logger,
            **self._hooks,
        )

    def _validate(self) -> None:
        entity = self._entity_type
        if not isinstance(entity, str) or not entity.strip():
            raise InvalidMappingError(repr(entity), "el tipo de entidad debe ser un string no vacío")
        if not isinstance(self._remote_id, str) or not self._remote_id.strip():
            raise InvalidMappingError(entity, "remote_id debe ser un string no vacío")

        for source, target in self._mappings.items():
            if not isinstance(source, str):
                raise InvalidMappingError(entity, f"campo remoto inválido en mappings: {source!r}")
            if target is not None and not isinstance(target, str):
                raise InvalidMappingError(entity, f"destino inválido para '{source}': {target!r}")

        for name in list(self._only) + list(self._except) + list(self._defaults):
            if not isinstance(name, str):
                raise InvalidMappingError(entity, f"nombre de campo local inválido: {name!r}")

        seen: set[str] = set()
        for association in self._associations:
            if association.name in seen:
                raise InvalidMappingError(entity, f"asociación duplicada '{association.name}'")
            if not isinstance(association.target, str) or not association.target.strip():
                raise InvalidMappingError(entity, f"asociación '{association.name}' sin tipo destino")
            seen.add(association.name)

        unknown = set(self._hooks) - set(HOOK_NAMES)
        if unknown:
            raise InvalidMappingError(entity, f"hooks desconocidos: {', '.join(sorted(unknown))}")

        callables = dict(self._hooks, fetch=self._fetch, find=self._find)
        for name, fn in callables.items():
            if fn is not None and not callable(fn):
                raise InvalidMappingError(entity, f"'{name}' debe ser callable")
