"""
test_logger.py — Tests para el logger de consola + archivo.
"""

import logging

from sitekeeper.utils.logger import console, get_logger


class TestSitekeeperLogger:

    def test_nombre(self):
        assert get_logger("sitekeeper.workflow").name == "sitekeeper.workflow"

    def test_prefijos_en_consola(self):
        """Cada nivel se distingue por su prefijo."""
        logger = get_logger("sitekeeper.test")

        with console.capture() as captura:
            logger.success("PR mergeado")
            logger.warning("sin uploads")
            logger.error("commit rechazado")

        salida = captura.get()
        assert "OK PR mergeado" in salida
        assert "! sin uploads" in salida
        assert "X commit rechazado" in salida

    def test_step_no_se_interpreta_como_markup(self):
        """Los corchetes de [n/total] y de las rutas se muestran tal cual."""
        logger = get_logger("sitekeeper.test")

        with console.capture() as captura:
            logger.step(1, 3, "save: create-branch [draft]")

        assert "[1/3] save: create-branch [draft]" in captura.get()

    def test_debug_no_va_a_consola(self):
        logger = get_logger("sitekeeper.test")

        with console.capture() as captura:
            logger.debug("GET https://api.github.com/...")

        assert captura.get() == ""

    def test_sin_archivo_durante_pytest(self):
        """Bajo pytest no se crea logs/sitekeeper.log."""
        logger = get_logger("sitekeeper.test")
        handlers = logger._file.handlers
        assert all(isinstance(h, logging.NullHandler) for h in handlers)
