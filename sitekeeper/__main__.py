"""
__main__.py — Permite ejecutar sitekeeper como módulo.

    python -m sitekeeper drafts
"""

from sitekeeper.cli import main

if __name__ == "__main__":
    main()
