"""
utils/ — Utilidades compartidas.

Módulos:
- logger.py   → Logging con Rich + archivo rotativo
- encoding.py → base64 para la API de contenidos
"""
