"""
notifications/ — Eventos que el modelo emite hacia la UI o la CLI.

Módulos:
- events.py → EventBus y nombres de eventos (github:commit:success, ...)
"""
