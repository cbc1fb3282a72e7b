"""
Capa de aplicación: orquestación de corridas de sincronización.
"""
from synchronisable.application.context import RunContext
from synchronisable.application.sync_unit import SyncUnit
from synchronisable.application.worker import Worker

__all__ = ["RunContext", "SyncUnit", "Worker"]
