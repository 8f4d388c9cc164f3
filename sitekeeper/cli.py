"""
cli.py — Punto de entrada de sitekeeper en la terminal.

Comandos disponibles:
    python -m sitekeeper config --show                          → Muestra configuración
    python -m sitekeeper drafts                                 → Drafts en progreso
    python -m sitekeeper assets --type images                   → Lista uploads
    python -m sitekeeper save pages/x.md -m "msg" --file x.md   → Guarda un cambio
    python -m sitekeeper publish pages/x.md -m "msg" --new      → Guarda y publica
    python -m sitekeeper clone 18f/federalist mi-sitio --org 18f

El repo y los branches salen de config.yaml; el token de GITHUB_TOKEN.

Uso:
    # Desde código (testing):
    from sitekeeper.cli import main
    main(["drafts"])
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.panel import Panel
from rich.table import Table

from sitekeeper import __version__
from sitekeeper.config import AppConfig, load_config
from sitekeeper.github.cloner import CloneDestination, CloneSource
from sitekeeper.github.errors import SitekeeperError
from sitekeeper.github.site import SiteRepository
from sitekeeper.notifications.events import Event, EventBus
from sitekeeper.utils.logger import get_logger, console as rich_console

logger = get_logger("sitekeeper.cli")


@click.group()
@click.version_option(version=__version__, prog_name="sitekeeper")
def main():
    """Edita y publica sitios Jekyll alojados en GitHub."""
    pass


@main.command()
@click.option("--show", is_flag=True, help="Muestra la configuración actual")
def config(show: bool):
    """Gestiona la configuración de sitekeeper."""
    cfg = load_config()

    if show:
        tabla = Table(title="Configuración de sitekeeper")
        tabla.add_column("Parámetro", style="cyan")
        tabla.add_column("Valor", style="green")

        tabla.add_row("API", cfg.github.api_url)
        tabla.add_row("Repo", f"{cfg.github.owner}/{cfg.github.repo}")
        tabla.add_row("Branch de trabajo", cfg.working_branch)
        tabla.add_row("Branch default", cfg.github.default_branch)
        tabla.add_row("Uploads", cfg.github.upload_root)
        tabla.add_row("Navegación", cfg.navigation.navbar_path)
        tabla.add_row("Servicio de clonado", cfg.clone.service_url)
        tabla.add_row("Engine", cfg.clone.engine)
        tabla.add_row("GitHub token", "✅ Configurado" if cfg.github_token else "❌ Falta")

        rich_console.print(tabla)
    else:
        _validate_config(cfg)


@main.command()
def drafts():
    """Lista los archivos con un draft sin publicar."""
    try:
        site = _build_site(load_config())
        if not site.fetch_drafts():
            _abort("No se pudieron listar los branches")

        tabla = Table(title=f"Drafts en {site.owner}/{site.name}")
        tabla.add_column("Archivo", style="cyan")
        for ruta in site.drafts:
            tabla.add_row(ruta)
        rich_console.print(tabla)
        logger.info(f"SHA de {site.default_branch}: {site.default_sha or '(no encontrado)'}")

    except SitekeeperError as e:
        _abort(str(e))


@main.command()
@click.option(
    "--type", "-t", "asset_type",
    default=None,
    help="Filtra por categoría: images o documents",
)
def assets(asset_type: str | None):
    """Lista los archivos del directorio de uploads."""
    try:
        site = _build_site(load_config())
        if not site.fetch_assets():
            _abort(f"No se pudo listar {site.upload_root}/")

        lista = site.filter_assets(asset_type) if asset_type else site.assets

        tabla = Table(title=f"Assets en {site.upload_root}/")
        tabla.add_column("Nombre", style="cyan")
        tabla.add_column("Tamaño", style="green", justify="right")
        tabla.add_column("Ruta")
        for asset in lista:
            tabla.add_row(asset.name, str(asset.size), asset.path)
        rich_console.print(tabla)

    except SitekeeperError as e:
        _abort(str(e))


def _write_options(func):
    """Opciones compartidas por save y publish."""
    func = click.option(
        "--new", "is_new_file",
        is_flag=True,
        default=False,
        help="El archivo es nuevo: agrega una entrada a la navegación",
    )(func)
    func = click.option(
        "--branch", "-b",
        default=None,
        help="Branch de trabajo (default: el de config.yaml)",
    )(func)
    func = click.option(
        "--file", "-f", "source_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="Archivo local con el contenido (default: PATH)",
    )(func)
    func = click.option(
        "--message", "-m",
        required=True,
        help="Mensaje del commit",
    )(func)
    return click.argument("path")(func)


@main.command()
@_write_options
def save(path: str, message: str, source_file: Path | None, branch: str | None, is_new_file: bool):
    """Guarda un archivo (commit directo o draft + PR)."""
    try:
        site = _load_site_for(path, branch)
        site.save(
            path=path,
            message=message,
            content=_read_content(source_file or Path(path)),
            is_new_file=is_new_file,
        )
        _show_result("Cambio guardado", site, path)
    except (SitekeeperError, OSError) as e:
        _abort(str(e))


@main.command()
@_write_options
def publish(path: str, message: str, source_file: Path | None, branch: str | None, is_new_file: bool):
    """Guarda un archivo y mergea su draft en el branch default."""
    try:
        site = _load_site_for(path, branch)
        site.publish(
            path=path,
            message=message,
            content=_read_content(source_file or Path(path)),
            is_new_file=is_new_file,
        )
        _show_result("Cambio publicado", site, path)
    except (SitekeeperError, OSError) as e:
        _abort(str(e))


@main.command()
@click.argument("source")
@click.argument("destination")
@click.option("--org", default=None, help="Organización dueña del repo nuevo")
@click.option("--branch", "-b", default=None, help="Branch a publicar")
@click.option("--engine", default=None, help="Motor de build (default: config.yaml)")
def clone(source: str, destination: str, org: str | None, branch: str | None, engine: str | None):
    """Crea un sitio nuevo copiando SOURCE (owner/repo) en DESTINATION."""
    owner, _, repository = source.partition("/")

    try:
        site = _build_site(load_config())
        site.clone(
            CloneSource(owner=owner, repository=repository),
            CloneDestination(
                repository=destination,
                organization=org,
                branch=branch,
                engine=engine,
            ),
        )
    except SitekeeperError as e:
        _abort(str(e))

    destino = f"{org}/{destination}" if org else destination
    rich_console.print(Panel(
        f"[bold]Origen:[/bold] {source}\n"
        f"[bold]Destino:[/bold] {destino}",
        title="Sitio clonado",
        border_style="green",
    ))


# ============================================================
# Funciones auxiliares (privadas)
# ============================================================

def _build_site(cfg: AppConfig, file: str | None = None) -> SiteRepository:
    """Construye el modelo y conecta los eventos de error al logger."""
    events = EventBus()
    events.on(Event.COMMIT_ERROR, lambda data: logger.error(
        f"GitHub rechazó el commit (status {data.get('response')})"
    ))
    return SiteRepository.from_config(cfg, file=file, events=events)


def _load_site_for(path: str, branch: str | None) -> SiteRepository:
    """Carga config, drafts, assets y el SHA actual de `path`."""
    cfg = load_config()
    if branch:
        cfg.github.branch = branch

    site = _build_site(cfg, file=path)
    if not site.fetch_config():
        _abort("No se pudo cargar la configuración del sitio")
    if not site.fetch_drafts():
        _abort("No se pudieron listar los branches")
    site.fetch_assets()
    site.fetch()
    return site


def _read_content(ruta: Path) -> bytes:
    return ruta.read_bytes()


def _show_result(titulo: str, site: SiteRepository, path: str) -> None:
    pr = f"#{site.pr_number}" if site.pr_number else "-"
    rich_console.print(Panel(
        f"[bold]Archivo:[/bold] {path}\n"
        f"[bold]Branch:[/bold] {site.branch}\n"
        f"[bold]PR:[/bold] {pr}",
        title=titulo,
        border_style="green",
    ))


def _validate_config(cfg: AppConfig) -> None:
    """Valida la configuración y muestra resultado."""
    problemas = []

    if not cfg.github_token:
        problemas.append("GITHUB_TOKEN no configurado en .env")
    if not cfg.github.owner or not cfg.github.repo:
        problemas.append("github.owner y github.repo son obligatorios en config.yaml")

    if problemas:
        for p in problemas:
            logger.error(p)
        sys.exit(1)
    logger.success("Configuración válida")


def _abort(mensaje: str) -> None:
    logger.error(mensaje)
    sys.exit(1)


if __name__ == "__main__":
    main()
