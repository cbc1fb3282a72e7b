"""
Excepciones del proceso de sincronización.

Dos familias:
- RecordSyncError: fatal solo para el registro remoto en curso.
  El ErrorHandler la captura, la registra y la corrida continua.
- ConfigurationError: defecto de configuración. Nunca se captura dentro
  del motor; aborta la corrida completa y llega al caller.
"""
from typing import Any, Optional

from synchronisable.shared.exceptions.base import SynchronisableError


class RecordSyncError(SynchronisableError):
    """Excepción base para errores fatales de un registro."""

    def __init__(self, message: str, error_code: str = "RECORD_ERROR", details=None):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class MissingRemoteIdentityError(RecordSyncError):
    """El registro remoto no contiene su identidad remota."""

    def __init__(self, entity_type: str, remote_id_field: str):
        super().__init__(
            message=f"{entity_type}: el registro remoto no contiene el id remoto '{remote_id_field}'",
            error_code="MISSING_REMOTE_ID",
            details={"entity": entity_type, "remote_id_field": remote_id_field}
        )


class MissingAssociationError(RecordSyncError):
    """Una asociación requerida no viene en el registro remoto."""

    def __init__(self, entity_type: str, association: str, key: str):
        super().__init__(
            message=f"{entity_type}: falta la asociación requerida '{association}' (campo '{key}')",
            error_code="MISSING_ASSOCIATION",
            details={"entity": entity_type, "association": association, "key": key}
        )


class RecordValidationError(RecordSyncError):
    """El almacén local rechazo los atributos del registro."""

    def __init__(self, entity_type: str, reason: str, attrs: Optional[dict] = None):
        super().__init__(
            message=f"{entity_type}: validación fallida - {reason}",
            error_code="VALIDATION_ERROR",
            details={"entity": entity_type, "attrs": attrs or {}}
        )


class LinkagePersistError(RecordSyncError):
    """
    No se pudo crear el vínculo de identidad tras crear la entidad local.
    La entidad queda creada pero inconsistente.
    """

    def __init__(self, entity_type: str, local_id: Any, remote_id: Any, reason: str):
        super().__init__(
            message=(
                f"{entity_type}: entidad {local_id} creada pero no se pudo vincular "
                f"al id remoto {remote_id!r} - {reason}"
            ),
            error_code="LINKAGE_PERSIST_ERROR",
            details={
                "entity": entity_type,
                "local_id": str(local_id),
                "remote_id": str(remote_id),
            }
        )


class RemoteRecordNotFoundError(RecordSyncError):
    """El lookup remoto por id no devolvió ningún registro."""

    def __init__(self, entity_type: str, remote_id: Any):
        super().__init__(
            message=f"{entity_type}: no existe registro remoto con id {remote_id!r}",
            error_code="REMOTE_RECORD_NOT_FOUND",
            details={"entity": entity_type, "remote_id": str(remote_id)}
        )


class ConfigurationError(SynchronisableError):
    """Excepción base para defectos de configuración (fatal para la corrida)."""

    def __init__(self, message: str, error_code: str = "CONFIGURATION_ERROR", details=None):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class InvalidMappingError(ConfigurationError):
    """Configuración de mapeo mal formada."""

    def __init__(self, entity_type: str, reason: str):
        super().__init__(
            message=f"{entity_type}: configuración inválida - {reason}",
            error_code="INVALID_MAPPING",
            details={"entity": entity_type}
        )


class UnknownEntityTypeError(ConfigurationError):
    """No hay synchronizer registrado para el tipo de entidad."""

    def __init__(self, entity_type: str):
        super().__init__(
            message=f"No hay synchronizer registrado para '{entity_type}'",
            error_code="UNKNOWN_ENTITY_TYPE",
            details={"entity": entity_type}
        )


class UnresolvedAssociationError(ConfigurationError):
    """Asociación declarada (o incluida) que no puede resolverse."""

    def __init__(self, entity_type: str, association: str, reason: str):
        super().__init__(
            message=f"{entity_type}.{association}: {reason}",
            error_code="UNRESOLVED_ASSOCIATION",
            details={"entity": entity_type, "association": association}
        )
