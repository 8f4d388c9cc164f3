"""
encoding.py — base64 para la API de contenidos de GitHub.

GitHub entrega y recibe el contenido de los archivos en base64.
Los listados pueden venir con saltos de línea cada 60 caracteres,
por eso decode_b64 los ignora.
"""

from __future__ import annotations

import base64
import binascii


def encode_b64(content: str | bytes) -> str:
    """Codifica texto (UTF-8) o bytes a base64 como str."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return base64.b64encode(content).decode("ascii")


def decode_b64(encoded: str) -> str:
    """
    Decodifica base64 a texto UTF-8.

    Raises:
        ValueError: Si el texto no es base64 válido o no es UTF-8.
    """
    if not isinstance(encoded, str):
        raise ValueError("Se esperaba contenido base64 como str")
    limpio = "".join(encoded.split())
    try:
        return base64.b64decode(limpio, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Contenido base64 inválido: {e}") from e
