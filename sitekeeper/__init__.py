"""
Sitekeeper — Edita y publica sitios Jekyll alojados en GitHub.

Este paquete contiene:
- github/        → Cliente de la API, drafts, publicación, navegación, clonado
- notifications/ → EventBus con los eventos github:*
- utils/         → Logger y base64
- config.py      → config.yaml + .env
- cli.py         → Comandos de terminal

Uso:
    python -m sitekeeper drafts
    python -m sitekeeper save about.md --message "Update about" --file about.md
    python -m sitekeeper publish about.md --message "Update about" --file about.md
"""

__version__ = "1.0.0"
