"""
test_navigation.py — Tests para las entradas nuevas de navbar.yml.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import yaml

from conftest import calls, contents_payload, make_response
from sitekeeper.github.config_files import SiteConfig, parse_config_payload
from sitekeeper.github.errors import PreconditionError
from sitekeeper.github.models import ConfigFile, ConfigStatus
from sitekeeper.github.navigation import NavigationUpdater, build_nav_entry, derive_title
from sitekeeper.github.workflow import CommitOptions, PublishWorkflow
from sitekeeper.notifications.events import EventBus

NAVBAR = "_data/navbar.yml"
NAVBAR_YML = "assigned:\n  - text: Inicio\n    href: index.md\n"


def _site_config(texto: str = NAVBAR_YML) -> SiteConfig:
    return SiteConfig({NAVBAR: parse_config_payload(NAVBAR, contents_payload(texto, sha="cacheado"))})


class TestTitulo:

    def test_title_del_front_matter(self):
        contenido = "---\nlayout: page\ntitle: Sobre nosotros \n---\nHola"
        assert derive_title(contenido, "pages/about.md") == "Sobre nosotros"

    def test_segundo_segmento_de_la_ruta(self):
        assert derive_title("sin front matter", "pages/about.md") == "about.md"

    def test_ruta_sin_segundo_segmento(self):
        assert derive_title("", "about.md") == ""

    def test_entrada(self):
        assert build_nav_entry("title: Blog", "pages/blog.md") == {
            "text": "Blog",
            "href": "pages/blog.md",
            "show_in_menu": False,
            "show_in_footer": False,
        }


class TestNavigationUpdater:

    def test_commit_al_default_con_sha_fresco(self, client, session):
        """Se usa el SHA recién pedido, no el de la carga inicial."""
        session.request.return_value = make_response(200, {"sha": "fresco"})
        commit = MagicMock(return_value={"content": {"sha": "nuevo"}})
        site_config = _site_config()
        updater = NavigationUpdater(client, lambda: site_config, commit, default_branch="main")

        updater.update("pages/nueva.md", "title: Nueva")

        metodo, url = calls(session)[0]
        assert metodo == "GET"
        assert "/contents/_data/navbar.yml?" in url and url.endswith("ref=main")

        opts = commit.call_args.args[0]
        assert isinstance(opts, CommitOptions)
        assert opts.path == NAVBAR
        assert opts.branch == "main"
        assert opts.message == "Updating navigation"
        assert opts.sha == "fresco"

        nav = yaml.safe_load(opts.content)
        assert nav["assigned"][-1] == {
            "text": "Nueva",
            "href": "pages/nueva.md",
            "show_in_menu": False,
            "show_in_footer": False,
        }
        assert len(nav["assigned"]) == 2
        assert len(site_config[NAVBAR].yaml["assigned"]) == 2

    def test_crea_assigned_si_falta(self, client, session):
        session.request.return_value = make_response(200, {"sha": "fresco"})
        commit = MagicMock()
        site_config = _site_config("otros: []\n")
        updater = NavigationUpdater(client, lambda: site_config, commit, default_branch="main")

        updater.update("pages/x.md", "")

        nav = yaml.safe_load(commit.call_args.args[0].content)
        assert nav["otros"] == []
        assert nav["assigned"][0]["text"] == "x.md"

    def test_navbar_no_cargado(self, client, session):
        """Sin navbar.yml válido no se hace ningún request."""
        site_config = SiteConfig({NAVBAR: ConfigFile(path=NAVBAR, status=ConfigStatus.MALFORMED)})
        updater = NavigationUpdater(client, lambda: site_config, MagicMock(), default_branch="main")

        with pytest.raises(PreconditionError):
            updater.update("pages/x.md", "title: X")

        session.request.assert_not_called()

    def test_error_del_commit_no_toca_la_cache(self, client, session):
        session.request.return_value = make_response(200, {"sha": "fresco"})
        commit = MagicMock(side_effect=RuntimeError("boom"))
        site_config = _site_config()
        updater = NavigationUpdater(client, lambda: site_config, commit, default_branch="main")

        with pytest.raises(RuntimeError):
            updater.update("pages/x.md", "title: X")

        assert len(site_config[NAVBAR].yaml["assigned"]) == 1

    def test_con_el_workflow_real(self, client, session):
        """Desde un draft, la navegación se escribe en el default."""
        session.request.side_effect = [
            make_response(200, {"sha": "fresco"}),
            make_response(200, {"content": {"sha": "s2"}}),
        ]
        client.repo.branch = "_draft-eA=="
        workflow = PublishWorkflow(client, EventBus(), default_branch="main", file="x")
        site_config = _site_config()
        workflow.navigation = NavigationUpdater(
            client, lambda: site_config, workflow.commit, default_branch="main"
        )

        workflow.update_nav(CommitOptions(path="pages/x.md", content="title: X", is_new_file=True))

        metodo, url = calls(session)[1]
        assert metodo == "PUT"
        assert "/contents/_data/navbar.yml?" in url and url.endswith("ref=main")
        payload = session.request.call_args.kwargs["json"]
        assert payload["branch"] == "main"
        assert payload["sha"] == "fresco"
        assert workflow.branch == "_draft-eA=="
