"""
assets.py — Archivos subidos al directorio de uploads.

El listado se pide al iniciar y se refresca después de cada upload
exitoso. filter_assets() separa imágenes de documentos por extensión.
"""

from __future__ import annotations

import re

from sitekeeper.github.client import GitHubClient
from sitekeeper.github.errors import UnknownAssetTypeError
from sitekeeper.github.models import Asset
from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.assets")

ASSET_PATTERNS: dict[str, re.Pattern[str]] = {
    "images": re.compile(r"\.jpg|\.jpeg|\.png|\.gif"),
    "documents": re.compile(r"\.doc|\.docx|\.pdf"),
}

# "image" es un alias histórico de "images"
ASSET_ALIASES = {"image": "images", "document": "documents"}


def is_upload_path(path: str, upload_root: str) -> bool:
    """True si `path` está dentro del directorio de uploads."""
    root = upload_root.strip("/")
    limpio = path.lstrip("/")
    return bool(root) and (limpio == root or limpio.startswith(root + "/"))


def filter_assets(assets: list[Asset], asset_type: str) -> list[Asset]:
    """
    Filtra assets por categoría, manteniendo el orden.

    Args:
        assets: Lista de assets.
        asset_type: "images" (o "image") o "documents".

    Raises:
        UnknownAssetTypeError: Si la categoría no existe.
    """
    categoria = ASSET_ALIASES.get(asset_type, asset_type)
    patron = ASSET_PATTERNS.get(categoria)
    if patron is None:
        raise UnknownAssetTypeError(
            f"Tipo de asset desconocido: {asset_type!r}. "
            f"Usa: {', '.join(ASSET_PATTERNS)}"
        )
    return [a for a in assets if patron.search(a.name)]


class AssetStore:
    """
    Caché ordenada de los assets del repo.

    Args:
        client: Cliente de GitHub.
        upload_root: Directorio de uploads (default: "uploads").
    """

    def __init__(self, client: GitHubClient, upload_root: str = "uploads"):
        self._client = client
        self.upload_root = upload_root
        self.assets: list[Asset] = []

    def fetch(self) -> list[Asset]:
        """
        Lista el directorio de uploads y reemplaza la caché.

        Raises:
            GitHubAPIError: Si GitHub no entrega el listado.
        """
        data = self._client.get(self._client.url(path=self.upload_root))
        entradas = data if isinstance(data, list) else []
        self.assets = [Asset.from_api(e) for e in entradas if isinstance(e, dict)]
        logger.info(f"{len(self.assets)} asset(s) en {self.upload_root}/")
        return self.assets

    def filter(self, asset_type: str) -> list[Asset]:
        return filter_assets(self.assets, asset_type)

    def is_upload(self, path: str) -> bool:
        return is_upload_path(path, self.upload_root)
