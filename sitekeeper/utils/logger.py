"""
logger.py — Logging para sitekeeper usando Rich + archivo.

Dual output:
- Rich console: colores y formato para uso interactivo (CLI)
- Archivo rotativo: logs/sitekeeper.log para revisar publicaciones fallidas

Uso:
    from sitekeeper.utils.logger import get_logger, console
    logger = get_logger("sitekeeper.github")
    logger.info("Creando branch de borrador...")
    logger.success("PR mergeado")
    logger.error("GitHub rechazó el commit")
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console

# No crear archivos de log durante pytest
_in_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ

# Consola global, compartida con la CLI (tablas y paneles)
console = Console()

# nivel → (nivel de logging, estilo Rich, prefijo en consola)
_NIVELES: dict[str, tuple[int, str, str]] = {
    "info": (logging.INFO, "cyan", ""),
    "success": (logging.INFO, "bold green", "OK "),
    "warning": (logging.WARNING, "bold yellow", "! "),
    "error": (logging.ERROR, "bold red", "X "),
    "step": (logging.INFO, "magenta", "  "),
}

# ================================================================
# File logging setup
# ================================================================

_file_logger: logging.Logger | None = None


def _setup_file_logger() -> logging.Logger:
    """Configura el logger de archivo con rotacion."""
    global _file_logger
    if _file_logger is not None:
        return _file_logger

    if _in_pytest:
        _file_logger = logging.getLogger("sitekeeper.null")
        _file_logger.addHandler(logging.NullHandler())
        return _file_logger

    log_dir = Path(os.environ.get("SITEKEEPER_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    _file_logger = logging.getLogger("sitekeeper.file")
    _file_logger.setLevel(logging.DEBUG)

    # Evitar handlers duplicados
    if not _file_logger.handlers:
        handler = RotatingFileHandler(
            log_dir / "sitekeeper.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        _file_logger.addHandler(handler)

    return _file_logger


class SitekeeperLogger:
    """
    Logger con salida Rich + archivo.

    Cada módulo crea su propio logger con un nombre para
    identificar de dónde viene cada mensaje.

    Args:
        name: Nombre del módulo (ej: "sitekeeper.workflow")
    """

    def __init__(self, name: str):
        self._name = name
        self._file = _setup_file_logger()

    @property
    def name(self) -> str:
        return self._name

    def debug(self, message: str) -> None:
        """Solo al archivo, nunca a la consola."""
        self._file.debug(f"[{self._name}] {message}")

    def _emit(self, nivel: str, message: str) -> None:
        nivel_log, estilo, prefijo = _NIVELES[nivel]
        console.print(f"{prefijo}{message}", style=estilo, markup=False, highlight=False)
        self._file.log(nivel_log, f"[{self._name}] {message}")

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def step(self, number: int, total: int, message: str) -> None:
        """Paso dentro de una serie (create-branch, commit, PR...)."""
        self._emit("step", f"[{number}/{total}] {message}")


def get_logger(name: str = "sitekeeper") -> SitekeeperLogger:
    """
    Obtiene un logger para el módulo especificado.

    Args:
        name: Nombre del módulo.

    Returns:
        SitekeeperLogger configurado.
    """
    return SitekeeperLogger(name)
