"""
Casos de uso de la librería.
"""
from .sync_use_cases import SyncUseCases

__all__ = ["SyncUseCases"]
