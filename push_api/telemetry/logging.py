"""
Configuración de logging.
- Nivel INFO por defecto; LOG_LEVEL=DEBUG en desarrollo.
- Formato con timestamps y nombre del logger.
- Integra con Uvicorn (ajusta sus loggers) para no duplicar.
"""
import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for uv_logger in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(uv_logger).setLevel(level)
    # httpx loguea cada request en INFO; con los envíos por token es ruido
    logging.getLogger("httpx").setLevel(logging.WARNING)
