"""
Dominio: configuración de sincronización por tipo de entidad.
"""
from synchronisable.domain.registry import SynchronizerRegistry
from synchronisable.domain.synchronizer import Association, Synchronizer, SynchronizerBuilder

__all__ = ["Association", "Synchronizer", "SynchronizerBuilder", "SynchronizerRegistry"]
