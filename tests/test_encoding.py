"""
test_encoding.py — Tests para base64 de la API de contenidos.
"""

import pytest

from sitekeeper.utils.encoding import decode_b64, encode_b64


class TestEncodeB64:

    def test_texto_utf8(self):
        """El texto se codifica como UTF-8."""
        assert encode_b64("hola") == "aG9sYQ=="
        assert encode_b64("año") == "YcOxbw=="

    def test_bytes(self):
        """Los binarios se codifican tal cual."""
        assert encode_b64(b"\x89PNG") == "iVBORw=="


class TestDecodeB64:

    def test_ignora_saltos_de_linea(self):
        """GitHub parte el base64 en líneas; se deben ignorar."""
        assert decode_b64("aG9s\nYQ==\n") == "hola"

    def test_base64_invalido(self):
        """Caracteres fuera del alfabeto dan ValueError."""
        with pytest.raises(ValueError):
            decode_b64("no es base64!!")

    def test_no_utf8(self):
        """Bytes que no son UTF-8 dan ValueError."""
        with pytest.raises(ValueError):
            decode_b64("/w==")

    def test_no_str(self):
        with pytest.raises(ValueError):
            decode_b64(None)
