"""
Configuración de logging (loguru).

El motor nunca exige un logger configurado: si no se llama a
configure_logging, loguru sigue escribiendo en stderr con su sink por defecto.
"""
import sys
from typing import Optional

from loguru import logger

from synchronisable.core.config import settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[sync]} | {message}"

_configured: bool = False


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Reemplaza el sink por defecto de loguru.

    Args:
        level: Nivel mínimo (por defecto settings.LOG_LEVEL)
        log_file: Archivo de log opcional (por defecto settings.LOG_FILE)
    """
    global _configured

    level = (level or settings.LOG_LEVEL).upper()
    log_file = settings.LOG_FILE if log_file is None else log_file

    logger.remove()
    logger.configure(extra={"sync": "-"})
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)

    if log_file:
        logger.add(
            log_file,
            format=LOG_FORMAT,
            rotation="100 MB",
            retention="10 days",
            level=level,
        )

    _configured = True
    logger.debug(f"Logging configurado (nivel={level}, archivo={log_file or '-'})")


def is_configured() -> bool:
    return _configured
