"""
drafts.py — Encuentra los borradores en progreso.

Un borrador es un branch llamado `_draft-<base64(ruta)>`. Listando
los branches del repo se sabe qué archivos tienen cambios sin
publicar, y de paso se obtiene el SHA del branch default, que es el
punto de partida de cualquier draft nuevo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sitekeeper.github.client import GitHubClient
from sitekeeper.utils.encoding import decode_b64, encode_b64
from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.drafts")

DRAFT_PREFIX = "_draft-"


def draft_branch_name(path: str, prefix: str = DRAFT_PREFIX) -> str:
    """`about.md` → `_draft-YWJvdXQubWQ=`"""
    return prefix + encode_b64(path)


def decode_draft_name(branch: str, prefix: str = DRAFT_PREFIX) -> str | None:
    """Ruta representada por un branch de draft, o None si no es uno."""
    if not branch or not branch.startswith(prefix):
        return None
    try:
        return decode_b64(branch[len(prefix):]) or None
    except ValueError:
        return None


@dataclass
class DraftIndex:
    """
    Resultado de listar branches.

    Campos:
        drafts: Rutas de archivo con un draft abierto
        default_sha: Commit del branch default; None si no apareció
        branches: Nombres de todos los branches
    """
    drafts: list[str] = field(default_factory=list)
    default_sha: str | None = None
    branches: list[str] = field(default_factory=list)

    @classmethod
    def from_branches(
        cls,
        data: list[dict[str, Any]],
        default_branch: str,
        prefix: str = DRAFT_PREFIX,
    ) -> DraftIndex:
        branches = [b for b in (data or []) if isinstance(b, dict)]
        nombres = [b.get("name", "") for b in branches]

        drafts = [d for d in (decode_draft_name(n, prefix) for n in nombres) if d]

        default_sha = None
        for b in branches:
            if b.get("name") == default_branch:
                default_sha = (b.get("commit") or {}).get("sha")
                break

        return cls(drafts=drafts, default_sha=default_sha, branches=nombres)


class DraftTracker:
    """Lista los branches del repo y arma el DraftIndex."""

    def __init__(self, client: GitHubClient, default_branch: str, prefix: str = DRAFT_PREFIX):
        self._client = client
        self._default_branch = default_branch
        self._prefix = prefix

    def fetch(self) -> DraftIndex:
        """
        GET repos/<owner>/<repo>/branches.

        Raises:
            GitHubAPIError: Si GitHub no entrega la lista.
        """
        data = self._client.get(self._client.url(root=True, path="branches"))
        index = DraftIndex.from_branches(
            data if isinstance(data, list) else [],
            self._default_branch,
            self._prefix,
        )

        if index.default_sha is None:
            logger.warning(
                f"El branch default '{self._default_branch}' no aparece; "
                "no se podrán crear drafts"
            )
        logger.info(f"{len(index.drafts)} draft(s) en progreso")
        return index
