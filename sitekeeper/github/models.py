"""
models.py — Datos que viajan entre GitHub y el modelo del sitio.

Todas son dataclasses simples. Las que se construyen a partir de
respuestas de la API tienen un classmethod from_api().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sitekeeper.utils.encoding import encode_b64


@dataclass
class RepositoryRef:
    """
    Identifica un repo de GitHub y su branch de trabajo.

    Campos:
        owner: Usuario u organización dueña del repo
        name: Nombre del repo
        branch: Branch de trabajo (cambia al crear/borrar un draft)
    """
    owner: str
    name: str
    branch: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class CommitRecord:
    """
    Payload de un PUT a la API de contenidos.

    `sha` es el SHA del blob anterior: obligatorio para actualizar,
    se omite al crear.
    """
    path: str
    message: str
    content: str  # base64
    branch: str
    sha: str | None = None

    @classmethod
    def build(
        cls,
        path: str,
        message: str,
        branch: str,
        content: str | bytes | None = None,
        base64: str | None = None,
        sha: str | None = None,
    ) -> CommitRecord:
        """Arma el commit; `base64` gana sobre `content` si vienen ambos."""
        if base64 is None:
            base64 = encode_b64(content if content is not None else "")
        return cls(path=path, message=message, content=base64, branch=branch, sha=sha)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "path": self.path,
            "message": self.message,
            "content": self.content,
            "branch": self.branch,
        }
        if self.sha:
            payload["sha"] = self.sha
        return payload


@dataclass
class PullRequest:
    """Pull Request abierto desde un draft hacia el branch default."""
    number: int
    head: str = ""
    base: str = ""
    title: str = ""
    url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PullRequest:
        head = data.get("head") or {}
        base = data.get("base") or {}
        return cls(
            number=int(data["number"]),
            head=head.get("ref", "") if isinstance(head, dict) else str(head),
            base=base.get("ref", "") if isinstance(base, dict) else str(base),
            title=data.get("title", ""),
            url=data.get("html_url", data.get("url", "")),
        )


class ConfigStatus(Enum):
    """
    Estado de un archivo de configuración después de la carga.

    PRESENT   → 200 y YAML válido
    ABSENT    → GitHub no lo entregó (404 u otro error)
    MALFORMED → Existe, pero no se pudo decodificar o parsear
    """
    PRESENT = "present"
    ABSENT = "absent"
    MALFORMED = "malformed"


@dataclass
class ConfigFile:
    """Un archivo de configuración del sitio (_config.yml, navbar.yml...)."""
    path: str
    status: ConfigStatus
    yaml: Any = None
    decoded_content: str = ""
    sha: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def present(self) -> bool:
        """True si GitHub respondió 200 (aunque el YAML sea inválido)."""
        return self.status is not ConfigStatus.ABSENT


@dataclass
class Asset:
    """Archivo subido bajo el directorio de uploads."""
    name: str
    path: str = ""
    sha: str = ""
    size: int = 0
    download_url: str = ""
    type: str = "file"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Asset:
        return cls(
            name=data.get("name", ""),
            path=data.get("path", ""),
            sha=data.get("sha", ""),
            size=int(data.get("size") or 0),
            download_url=data.get("download_url") or "",
            type=data.get("type", "file"),
        )


@dataclass
class FileState:
    """
    Lo último que se leyó del archivo (o directorio) actual.

    `sha` se actualiza después de cada commit exitoso para que la
    siguiente escritura use el blob más reciente.
    """
    json: Any = None
    type: str = "directory"

    @property
    def sha(self) -> str | None:
        if isinstance(self.json, dict):
            return self.json.get("sha")
        return None

    @sha.setter
    def sha(self, value: str | None) -> None:
        if not isinstance(self.json, dict):
            self.json = {}
        self.json["sha"] = value

    @classmethod
    def from_api(cls, data: Any) -> FileState:
        tipo = "directory"
        if isinstance(data, dict) and data.get("type"):
            tipo = data["type"]
        return cls(json=data, type=tipo)
