"""
workflow.py — Flujo de publicación: draft → commit → PR → merge → limpieza.

Este es el corazón del modelo. Editar un archivo del sitio sin tocar
directamente el branch default funciona así:

    1. create_draft_branch  → POST git/refs  (_draft-<base64(ruta)>)
    2. commit               → PUT contents/<ruta> en el draft
    3. create_pr            → POST pulls (draft → default)
    4. update_nav           → solo si el archivo es nuevo; commit
                              directo al branch default
    5. get_pr               → GET pulls?head=<draft>
    6. merge_pr             → PUT pulls/<n>/merge
    7. delete_branch        → DELETE git/refs/heads/<draft>

save()    = 1 → 2 → 3 → 4   (en el branch default: solo 2)
publish() = save → 5 → 6 → 7

Cada paso depende del anterior: si uno falla, la serie se corta y
el repo queda en el estado del último paso exitoso (por ejemplo, un
draft con PR abierto sin mergear). No hay reintentos ni rollback.

Estado explícito:

    Editing(branch) ──create_draft──▶ Drafting(branch, pr=None)
    Drafting ──create_pr/get_pr──▶ Drafting(branch, pr=N)
    Drafting(pr=N) ──merge_pr──▶ Merging(branch)
    Merging / Drafting ──delete_branch──▶ CleanedUp(default)

Las funciones de transición devuelven el estado nuevo o lanzan
PreconditionError sin tocar la red. No es seguro correr dos
save/publish a la vez sobre el mismo workflow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

from sitekeeper.github.assets import AssetStore
from sitekeeper.github.client import GitHubClient
from sitekeeper.github.drafts import DRAFT_PREFIX, draft_branch_name
from sitekeeper.github.errors import (
    GitHubAPIError,
    PreconditionError,
    PullRequestNotFoundError,
)
from sitekeeper.github.models import CommitRecord, FileState, PullRequest
from sitekeeper.github.series import Step, run_series
from sitekeeper.notifications.events import Event, EventBus
from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.workflow")

DEFAULT_MERGE_MESSAGE = "Merged via Federalist"


# ============================================================
# Estados
# ============================================================

@dataclass(frozen=True)
class Editing:
    """Trabajando sobre un branch existente (normalmente el default)."""
    branch: str

    @property
    def pr_number(self) -> int | None:
        return None


@dataclass(frozen=True)
class Drafting:
    """En un branch de draft; pr_number se llena al crear o encontrar el PR."""
    branch: str
    pr_number: int | None = None


@dataclass(frozen=True)
class Merging:
    """El PR ya se mergeó; falta borrar el branch."""
    branch: str

    @property
    def pr_number(self) -> int | None:
        return None


@dataclass(frozen=True)
class CleanedUp:
    """Draft borrado; de vuelta en el branch default."""
    branch: str

    @property
    def pr_number(self) -> int | None:
        return None


WorkflowState = Union[Editing, Drafting, Merging, CleanedUp]


def start_draft(state: WorkflowState, draft_branch: str) -> Drafting:
    """Editing/CleanedUp/Drafting → Drafting en el branch nuevo."""
    if isinstance(state, Merging):
        raise PreconditionError(
            f"El branch {state.branch} ya se mergeó; bórralo antes de otro draft"
        )
    return Drafting(branch=draft_branch)


def attach_pr(state: WorkflowState, number: int) -> Drafting:
    """Cualquier branch que no esté mergeado puede tener un PR abierto."""
    if isinstance(state, (Merging, CleanedUp)):
        raise PreconditionError(f"No se puede asociar un PR en {type(state).__name__}")
    return Drafting(branch=state.branch, pr_number=number)


def begin_merge(state: WorkflowState) -> int:
    """Número de PR a mergear; falla si no hay uno en caché."""
    if not state.pr_number:
        raise PreconditionError("PR not available")
    return state.pr_number


def finish_merge(state: WorkflowState) -> Merging:
    """PR mergeado: se olvida el número y queda pendiente la limpieza."""
    return Merging(branch=state.branch)


def cleanup(state: WorkflowState, default_branch: str) -> CleanedUp:
    """Valida que el branch a borrar no sea el default."""
    if state.branch == default_branch:
        raise PreconditionError("Unable to delete default branch")
    return CleanedUp(branch=default_branch)


# ============================================================
# Opciones de commit
# ============================================================

@dataclass
class CommitOptions:
    """
    Parámetros de una escritura.

    Campos:
        path: Ruta del archivo (default: el archivo actual del modelo)
        message: Mensaje del commit
        content: Texto a escribir (se codifica a base64)
        base64: Contenido ya codificado (para binarios)
        sha: SHA del blob anterior; si falta se usa el último conocido
        branch: Branch destino (default: branch de trabajo)
        is_new_file: Si es nuevo, save() agrega una entrada de navegación
    """
    path: str | None = None
    message: str = ""
    content: str | bytes | None = None
    base64: str | None = None
    sha: str | None = None
    branch: str | None = None
    is_new_file: bool = False


class PublishWorkflow:
    """
    Ejecuta los pasos de publicación contra la API de GitHub.

    Args:
        client: Cliente de GitHub (su repo.branch es el branch de trabajo).
        events: Bus donde se emiten commit/upload.
        default_branch: Branch base de drafts y destino de los merges.
        file: Archivo actual del modelo.
        file_state: Último estado leído del archivo actual.
        assets: Caché de assets (se refresca tras cada upload).
        default_sha: Callable que devuelve el SHA actual del branch default.
        navigation: Objeto con update(path, content) para archivos nuevos.
        merge_message: Mensaje del merge.
        draft_prefix: Prefijo de los branches de draft.
    """

    def __init__(
        self,
        client: GitHubClient,
        events: EventBus,
        default_branch: str,
        file: str | None = None,
        file_state: FileState | None = None,
        assets: AssetStore | None = None,
        default_sha: Callable[[], str | None] | None = None,
        navigation: Any = None,
        merge_message: str = DEFAULT_MERGE_MESSAGE,
        draft_prefix: str = DRAFT_PREFIX,
    ):
        self._client = client
        self._events = events
        self.default_branch = default_branch
        self.file = file
        self.file_state = file_state or FileState()
        self._assets = assets
        self._default_sha = default_sha or (lambda: None)
        self.navigation = navigation
        self.merge_message = merge_message
        self.draft_prefix = draft_prefix

        # Último SHA conocido por ruta
        self.shas: dict[str, str] = {}
        self.state: WorkflowState = Editing(branch=client.repo.branch or default_branch)
        self._client.repo.branch = self.state.branch

    # ============================================================
    # Estado
    # ============================================================

    @property
    def branch(self) -> str:
        return self.state.branch

    @property
    def pr_number(self) -> int | None:
        return self.state.pr_number

    @property
    def on_default_branch(self) -> bool:
        return self.state.branch == self.default_branch

    def _set_state(self, state: WorkflowState) -> None:
        """Único lugar donde cambia el branch de trabajo."""
        logger.debug(f"estado: {self.state} → {state}")
        self.state = state
        self._client.repo.branch = state.branch

    def known_sha(self, path: str) -> str | None:
        """Último SHA conocido de `path` (de commits previos o del fetch)."""
        if path in self.shas:
            return self.shas[path]
        if path == self.file:
            return self.file_state.sha
        return None

    # ============================================================
    # Pasos
    # ============================================================

    def create_draft_branch(self, path: str | None = None) -> dict[str, Any]:
        """
        Crea `_draft-<base64(ruta)>` apuntando al commit del default.

        Raises:
            PreconditionError: Sin SHA del default o sin ruta (sin red).
            GitHubAPIError: Si GitHub rechaza el ref.
        """
        ruta = path or self.file
        sha = self._default_sha()
        if not sha:
            raise PreconditionError("No SHA available")
        if not ruta:
            raise PreconditionError("No hay archivo para nombrar el draft")

        nombre = draft_branch_name(ruta, self.draft_prefix)
        nuevo_estado = start_draft(self.state, nombre)

        url = self._client.url(root=True, path="git/refs", params={"ref": None})
        respuesta = self._client.post(url, json={"ref": f"refs/heads/{nombre}", "sha": sha})

        self._set_state(nuevo_estado)
        logger.success(f"Draft creado: {nombre}")
        return respuesta

    def commit(self, opts: CommitOptions) -> dict[str, Any]:
        """
        Escribe un archivo (base64) en el branch de trabajo.

        Un path dentro del directorio de uploads es un upload: al
        terminar se refrescan los assets y se emite github:upload:success
        en vez de github:commit:success.

        Raises:
            PreconditionError: Sin ruta.
            GitHubAPIError: Si GitHub rechaza la escritura (ej: SHA viejo).
        """
        ruta = opts.path or self.file
        if not ruta:
            raise PreconditionError("Commit sin ruta de archivo")

        record = CommitRecord.build(
            path=ruta,
            message=opts.message,
            branch=opts.branch or self.branch,
            content=opts.content,
            base64=opts.base64,
            sha=opts.sha or self.known_sha(ruta),
        )
        payload = record.to_payload()
        url = self._client.url(path=ruta, branch=opts.branch)

        try:
            respuesta = self._client.put(url, json=payload)
        except GitHubAPIError as e:
            logger.error(f"Commit rechazado en {ruta}: {e}")
            self._events.emit(
                Event.COMMIT_ERROR, {"request": payload, "response": e.status}
            )
            raise

        self._remember_sha(ruta, respuesta)

        if self._assets is not None and self._assets.is_upload(ruta):
            self._refresh_assets()
            self._events.emit(Event.UPLOAD_SUCCESS, respuesta)
            logger.success(f"Upload exitoso: {ruta}")
        else:
            self._events.emit(
                Event.COMMIT_SUCCESS, {"request": payload, "response": respuesta}
            )
            logger.success(f"Commit exitoso: {ruta} en {record.branch}")

        return respuesta

    def create_pr(self, path: str | None = None) -> PullRequest:
        """Abre un PR del branch de trabajo hacia el default; el título nombra `path`."""
        url = self._client.url(root=True, path="pulls")
        respuesta = self._client.post(url, json={
            "title": f"Draft updates for {path or self.file}",
            "body": "",
            "head": self.branch,
            "base": self.default_branch,
        })

        pr = PullRequest.from_api(respuesta)
        self._set_state(attach_pr(self.state, pr.number))
        logger.success(f"PR #{pr.number} abierto: {self.branch} → {self.default_branch}")
        return pr

    def update_nav(self, opts: CommitOptions) -> dict[str, Any] | None:
        """Agrega el archivo nuevo a la navegación; no-op si no es nuevo."""
        if not opts.is_new_file:
            return None
        if self.navigation is None:
            raise PreconditionError("No hay actualizador de navegación configurado")
        return self.navigation.update(opts.path or self.file or "", self._text(opts))

    def get_pr(self) -> PullRequest:
        """
        Busca el PR abierto cuyo head es el branch de trabajo.

        Raises:
            PullRequestNotFoundError: Si no hay ninguno.
        """
        url = self._client.url(
            root=True,
            path="pulls",
            params={"head": f"{self._client.repo.owner}:{self.branch}"},
        )
        respuesta = self._client.get(url)
        candidatos = [p for p in (respuesta or []) if isinstance(p, dict)]
        propios = [
            p for p in candidatos
            if not isinstance(p.get("head"), dict) or p["head"].get("ref") == self.branch
        ]
        if not propios:
            raise PullRequestNotFoundError(f"No hay PR abierto para {self.branch}")

        pr = PullRequest.from_api(propios[0])
        self._set_state(attach_pr(self.state, pr.number))
        return pr

    def merge_pr(self) -> dict[str, Any]:
        """
        Mergea el PR en caché con el mensaje fijo y lo olvida.

        Raises:
            PreconditionError: Si no hay PR en caché (sin red).
        """
        numero = begin_merge(self.state)
        url = self._client.url(root=True, path=f"pulls/{numero}/merge")
        respuesta = self._client.put(url, json={"commit_message": self.merge_message})

        self._set_state(finish_merge(self.state))
        logger.success(f"PR #{numero} mergeado")
        return respuesta

    def delete_branch(self) -> Any:
        """
        Borra el branch de trabajo y vuelve al default.

        Raises:
            PreconditionError: Si el branch actual es el default (sin red).
        """
        siguiente = cleanup(self.state, self.default_branch)
        branch = self.branch

        url = self._client.url(root=True, path=f"git/refs/heads/{branch}")
        respuesta = self._client.delete(url)

        self._set_state(siguiente)
        logger.success(f"Branch borrado: {branch}")
        return respuesta

    # ============================================================
    # Series
    # ============================================================

    def save(self, opts: CommitOptions) -> list[Any]:
        """
        Guarda un cambio.

        En el branch default es un commit directo. En cualquier otro
        branch: create_draft_branch → commit → create_pr → update_nav.
        """
        if self.on_default_branch:
            return run_series([Step("commit", lambda: self.commit(opts))], label="save")

        return run_series([
            Step("create-branch", lambda: self.create_draft_branch(opts.path)),
            Step("commit", lambda: self.commit(opts)),
            Step("create-pr", lambda: self.create_pr(opts.path)),
            Step("update-nav", lambda: self.update_nav(opts)),
        ], label="save")

    def publish(self, opts: CommitOptions) -> list[Any]:
        """save → get_pr → merge_pr → delete_branch."""
        return run_series([
            Step("save", lambda: self.save(opts)),
            Step("get-pr", self.get_pr),
            Step("merge-pr", self.merge_pr),
            Step("delete-branch", self.delete_branch),
        ], label="publish")

    # ============================================================
    # Utilidades
    # ============================================================

    def _remember_sha(self, path: str, respuesta: Any) -> None:
        contenido = respuesta.get("content") if isinstance(respuesta, dict) else None
        sha = contenido.get("sha") if isinstance(contenido, dict) else None
        if not sha:
            return
        self.shas[path] = sha
        if path == self.file:
            self.file_state.sha = sha

    def _refresh_assets(self) -> None:
        """Refresca la caché de assets; un fallo se avisa como evento."""
        try:
            assets = self._assets.fetch()
        except GitHubAPIError as e:
            self._events.emit(Event.FETCH_ASSETS_ERROR, e.status)
            return
        self._events.emit(Event.FETCH_ASSETS_SUCCESS, assets)

    @staticmethod
    def _text(opts: CommitOptions) -> str:
        if isinstance(opts.content, bytes):
            return opts.content.decode("utf-8", errors="replace")
        return opts.content or ""
