"""
Excepciones de la librería.
"""
from synchronisable.shared.exceptions.base import SynchronisableError
from synchronisable.shared.exceptions.sync import (
    ConfigurationError,
    InvalidMappingError,
    LinkagePersistError,
    MissingAssociationError,
    MissingRemoteIdentityError,
    RecordSyncError,
    RecordValidationError,
    RemoteRecordNotFoundError,
    UnknownEntityTypeError,
    UnresolvedAssociationError,
)

__all__ = [
    "SynchronisableError",
    "RecordSyncError",
    "MissingRemoteIdentityError",
    "MissingAssociationError",
    "RecordValidationError",
    "LinkagePersistError",
    "RemoteRecordNotFoundError",
    "ConfigurationError",
    "InvalidMappingError",
    "UnknownEntityTypeError",
    "UnresolvedAssociationError",
]
