"""
Sincronización one-way: fuente remota -> almacén local.

Diseno (resumen):
- Un Synchronizer por tipo de entidad define id remoto, mapeos y hooks
- El Worker crea o actualiza cada registro y recorre sus asociaciones
- La tabla imports vincula cada entidad local con su id remoto
- Los errores de un registro no abortan el batch
"""
from synchronisable.application.context import RunContext
from synchronisable.application.use_cases.sync_use_cases import SyncUseCases
from synchronisable.application.worker import Worker
from synchronisable.domain.registry import SynchronizerRegistry
from synchronisable.domain.synchronizer import Association, Synchronizer, SynchronizerBuilder

__version__ = "1.0.8"

__all__ = [
    "Association",
    "RunContext",
    "SyncUseCases",
    "Synchronizer",
    "SynchronizerBuilder",
    "SynchronizerRegistry",
    "Worker",
]
