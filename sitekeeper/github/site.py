"""
site.py — El modelo de un sitio alojado en un repo de GitHub.

SiteRepository junta todas las piezas: cliente HTTP, caché de
configuración, drafts, assets, flujo de publicación, navegación y
clonado. Es lo que usan la UI y la CLI.

Inicialización (en serie, se detiene en la primera falla):
    1. fetch_config  → _config.yml + _data/navbar.yml en paralelo
    2. fetch_drafts  → branches _draft-*, SHA del default
    3. fetch_assets + fetch (archivo actual)

Cada fase emite github:<fase>:success o github:<fase>:error en el
EventBus que se le pasa al modelo.

Uso:
    from sitekeeper.github.site import SiteRepository
    site = SiteRepository(token="...", owner="18f", repo_name="federalist",
                          default_branch="main", file="about.md")
    site.initialize()
    site.publish(path="about.md", message="Update about", content="---\\ntitle: About\\n---")
"""

from __future__ import annotations

from typing import Any, Sequence

import requests

from sitekeeper.config import AppConfig
from sitekeeper.github.assets import AssetStore
from sitekeeper.github.client import DEFAULT_API_URL, GitHubClient
from sitekeeper.github.cloner import (
    DEFAULT_ENGINE,
    CloneDestination,
    CloneSource,
    RepositoryCloner,
)
from sitekeeper.github.config_files import ConfigLoader, SiteConfig
from sitekeeper.github.drafts import DRAFT_PREFIX, DraftIndex, DraftTracker
from sitekeeper.github.errors import GitHubAPIError, SitekeeperError
from sitekeeper.github.models import Asset, FileState, RepositoryRef
from sitekeeper.github.navigation import (
    DEFAULT_NAV_MESSAGE,
    DEFAULT_NAVBAR_PATH,
    NavigationUpdater,
)
from sitekeeper.github.workflow import (
    DEFAULT_MERGE_MESSAGE,
    CommitOptions,
    PublishWorkflow,
    WorkflowState,
)
from sitekeeper.notifications.events import Event, EventBus
from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.site")


class SiteRepository:
    """
    Modelo cliente de un sitio en GitHub.

    Args:
        token: Token OAuth de GitHub (obligatorio).
        owner: Dueño del repo.
        repo_name: Nombre del repo.
        branch: Branch de trabajo inicial (default: default_branch).
        default_branch: Branch principal del sitio.
        file: Archivo que se está editando.
        upload_root: Directorio de uploads.
        events: EventBus donde se publican los eventos.
        session: requests.Session inyectable.
        api_url: Base de la API de GitHub.
        clone_service_url: Base del servicio de clonado.
        engine: Motor de build por defecto al clonar.
        config_paths: Archivos de configuración a cargar.
        navbar_path: Archivo de navegación.
        timeout: Timeout por request.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo_name: str,
        branch: str | None = None,
        default_branch: str = "main",
        file: str | None = None,
        upload_root: str = "uploads",
        events: EventBus | None = None,
        session: requests.Session | None = None,
        api_url: str = DEFAULT_API_URL,
        clone_service_url: str = "",
        engine: str = DEFAULT_ENGINE,
        config_paths: Sequence[str] = ("_config.yml", DEFAULT_NAVBAR_PATH),
        navbar_path: str = DEFAULT_NAVBAR_PATH,
        merge_message: str = DEFAULT_MERGE_MESSAGE,
        nav_message: str = DEFAULT_NAV_MESSAGE,
        draft_prefix: str = DRAFT_PREFIX,
        timeout: int = 30,
    ):
        self.events = events or EventBus()
        self.default_branch = default_branch
        self.file = file
        self.upload_root = upload_root

        self.client = GitHubClient(
            token,
            RepositoryRef(owner=owner, name=repo_name, branch=branch or default_branch),
            file=file,
            api_url=api_url,
            session=session,
            timeout=timeout,
        )

        self.config_files: SiteConfig | None = None
        self._site_config_path = config_paths[0] if config_paths else "_config.yml"
        self.draft_index = DraftIndex()

        self._config_loader = ConfigLoader(self.client, config_paths)
        self._drafts = DraftTracker(self.client, default_branch, draft_prefix)
        self._assets = AssetStore(self.client, upload_root)

        self.workflow = PublishWorkflow(
            self.client,
            self.events,
            default_branch=default_branch,
            file=file,
            assets=self._assets,
            default_sha=lambda: self.draft_index.default_sha,
            merge_message=merge_message,
            draft_prefix=draft_prefix,
        )
        self.workflow.navigation = NavigationUpdater(
            self.client,
            site_config=lambda: self.config_files,
            commit=self.workflow.commit,
            default_branch=default_branch,
            navbar_path=navbar_path,
            message=nav_message,
        )
        self._cloner = RepositoryCloner(
            self.client,
            service_url=clone_service_url,
            default_engine=engine,
            branch=lambda: self.branch,
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        file: str | None = None,
        events: EventBus | None = None,
        session: requests.Session | None = None,
    ) -> SiteRepository:
        """Crea el modelo a partir de config.yaml + .env."""
        gh = config.github
        nav = config.navigation
        return cls(
            token=config.github_token,
            owner=gh.owner,
            repo_name=gh.repo,
            branch=config.working_branch,
            default_branch=gh.default_branch,
            file=file,
            upload_root=gh.upload_root,
            events=events,
            session=session,
            api_url=gh.api_url,
            clone_service_url=config.clone.service_url,
            engine=config.clone.engine,
            config_paths=(nav.site_config_path, nav.navbar_path),
            navbar_path=nav.navbar_path,
            merge_message=nav.merge_message,
            nav_message=nav.commit_message,
            draft_prefix=nav.draft_prefix,
            timeout=gh.timeout,
        )

    # ============================================================
    # Propiedades
    # ============================================================

    @property
    def owner(self) -> str:
        return self.client.repo.owner

    @property
    def name(self) -> str:
        return self.client.repo.name

    @property
    def branch(self) -> str:
        return self.workflow.branch

    @property
    def state(self) -> WorkflowState:
        return self.workflow.state

    @property
    def pr_number(self) -> int | None:
        return self.workflow.pr_number

    @property
    def drafts(self) -> list[str]:
        return self.draft_index.drafts

    @property
    def default_sha(self) -> str | None:
        return self.draft_index.default_sha

    @property
    def assets(self) -> list[Asset]:
        return self._assets.assets

    @property
    def file_state(self) -> FileState:
        return self.workflow.file_state

    # ============================================================
    # Carga inicial
    # ============================================================

    def initialize(self) -> bool:
        """
        config → drafts → assets + archivo actual.

        Returns:
            True si las tres fases terminaron bien.
        """
        if not self.fetch_config():
            return False
        if not self.fetch_drafts():
            return False
        assets_ok = self.fetch_assets()
        self.fetch()
        return assets_ok

    def fetch_config(self) -> bool:
        """Carga los archivos de configuración y emite fetchConfig."""
        try:
            self.config_files = self._config_loader.fetch_all()
        except SitekeeperError as e:
            logger.error(f"No se pudo cargar la configuración: {e}")
            self.events.emit(Event.FETCH_CONFIG_ERROR, None)
            return False

        self.events.emit(Event.FETCH_CONFIG_SUCCESS, self.config_files)
        return True

    def fetch_drafts(self) -> bool:
        """Lista branches, guarda drafts y SHA del default."""
        try:
            self.draft_index = self._drafts.fetch()
        except GitHubAPIError as e:
            logger.error(f"No se pudieron listar los branches: {e}")
            self.events.emit(Event.FETCH_DRAFTS_ERROR, e.status)
            return False

        self.events.emit(Event.FETCH_DRAFTS_SUCCESS, self.draft_index)
        return True

    def fetch_assets(self) -> bool:
        """Lista el directorio de uploads."""
        try:
            assets = self._assets.fetch()
        except GitHubAPIError as e:
            logger.warning(f"No se pudieron listar los assets: {e}")
            self.events.emit(Event.FETCH_ASSETS_ERROR, e.status)
            return False

        self.events.emit(Event.FETCH_ASSETS_SUCCESS, assets)
        return True

    def fetch(self) -> FileState | None:
        """Lee el archivo (o directorio) actual y cachea su SHA."""
        try:
            data = self.client.get(self.client.url())
        except GitHubAPIError as e:
            logger.warning(f"No se pudo leer {self.file or '/'}: {e}")
            return None

        self.workflow.file_state = FileState.from_api(data)
        return self.workflow.file_state

    # ============================================================
    # Configuración del sitio
    # ============================================================

    def get_defaults(self) -> str:
        if self.config_files is None:
            return "\n"
        return self.config_files.get_defaults(self._site_config_path)

    def get_layouts(self) -> list[str]:
        if self.config_files is None:
            return ["default"]
        return self.config_files.get_layouts(self._site_config_path)

    def filter_assets(self, asset_type: str) -> list[Asset]:
        return self._assets.filter(asset_type)

    # ============================================================
    # Escritura y publicación
    # ============================================================

    def url(self, **kwargs: Any) -> str:
        return self.client.url(**kwargs)

    def commit(self, **kwargs: Any) -> dict[str, Any]:
        return self.workflow.commit(CommitOptions(**kwargs))

    def save(self, **kwargs: Any) -> list[Any]:
        return self.workflow.save(CommitOptions(**kwargs))

    def publish(self, **kwargs: Any) -> list[Any]:
        return self.workflow.publish(CommitOptions(**kwargs))

    def create_draft_branch(self, path: str | None = None) -> dict[str, Any]:
        return self.workflow.create_draft_branch(path)

    def create_pr(self, path: str | None = None):
        return self.workflow.create_pr(path)

    def get_pr(self):
        return self.workflow.get_pr()

    def merge_pr(self) -> dict[str, Any]:
        return self.workflow.merge_pr()

    def delete_branch(self) -> Any:
        return self.workflow.delete_branch()

    def update_nav(self, **kwargs: Any) -> Any:
        return self.workflow.update_nav(CommitOptions(**kwargs))

    # ============================================================
    # Clonado
    # ============================================================

    @property
    def cloner(self) -> RepositoryCloner:
        return self._cloner

    def clone(
        self,
        source: CloneSource | None,
        destination: CloneDestination | None,
    ) -> list[Any]:
        return self._cloner.clone(source, destination)
