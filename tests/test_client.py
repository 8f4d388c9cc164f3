"""
test_client.py — Tests para GitHubClient.

Verifica:
- Formato de las URLs (contents, raíz del repo, user/orgs)
- access_token y ref en el query string
- Header Authorization solo en escrituras
- Traducción de errores HTTP y de conexión a GitHubAPIError
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import TOKEN, make_response
from sitekeeper.github.client import GitHubClient
from sitekeeper.github.errors import ConfigurationError, GitHubAPIError
from sitekeeper.github.models import RepositoryRef

BASE = "https://api.github.com"


# ================================================================
# Construcción
# ================================================================

class TestConstruccion:

    def test_sin_token_falla(self):
        """Sin token no se puede construir el cliente."""
        with pytest.raises(ConfigurationError, match="Must provide Github OAuth token"):
            GitHubClient("", RepositoryRef("18f", "federalist", "main"))

    def test_api_url_sin_slash_final(self, session):
        client = GitHubClient(
            TOKEN,
            RepositoryRef("18f", "federalist", "main"),
            api_url="https://ghe.example.com/api/v3/",
            session=session,
        )
        assert client.url(root=True).startswith("https://ghe.example.com/api/v3/repos/")


# ================================================================
# URLs
# ================================================================

class TestUrl:

    def test_contents_con_path(self, client):
        """url(path=...) apunta a /contents/<path>."""
        assert client.url(path="test.md") == (
            f"{BASE}/repos/18f/federalist/contents/test.md"
            f"?access_token={TOKEN}&ref=main"
        )

    def test_raiz_del_repo(self, client):
        assert client.url(root=True) == (
            f"{BASE}/repos/18f/federalist?access_token={TOKEN}&ref=main"
        )

    def test_raiz_con_path(self, client):
        url = client.url(root=True, path="git/refs")
        assert url.startswith(f"{BASE}/repos/18f/federalist/git/refs?")

    def test_route_y_method(self, client):
        """route + method ignoran owner/repo."""
        assert client.url(route="user", method="repos").startswith(f"{BASE}/user/repos?")
        assert client.url(route="orgs/18f", method="repos").startswith(f"{BASE}/orgs/18f/repos?")

    def test_owner_y_repo_explicitos(self, client):
        url = client.url(root=True, owner="otro", repository="sitio")
        assert url.startswith(f"{BASE}/repos/otro/sitio?")

    def test_archivo_actual_por_defecto(self, session):
        """Sin path, las rutas de contents usan el archivo actual."""
        client = GitHubClient(
            TOKEN,
            RepositoryRef("18f", "federalist", "main"),
            file="about.md",
            session=session,
        )
        assert client.url().startswith(f"{BASE}/repos/18f/federalist/contents/about.md?")
        assert client.url(root=True, path="pulls").startswith(
            f"{BASE}/repos/18f/federalist/pulls?"
        )

    def test_branch_explicito(self, client):
        assert client.url(path="x.md", branch="gh-pages").endswith("&ref=gh-pages")

    def test_ref_sigue_al_branch_de_trabajo(self, client):
        client.repo.branch = "_draft-abc"
        assert "ref=_draft-abc" in client.url(path="x.md")

    def test_params_extra_y_none(self, client):
        """Un param None quita el parámetro; los demás se agregan."""
        url = client.url(root=True, path="git/refs", params={"ref": None})
        assert url.endswith(f"?access_token={TOKEN}")

        url = client.url(root=True, path="pulls", params={"head": "18f:draft"})
        assert url.endswith("&head=18f%3Adraft")


# ================================================================
# Requests
# ================================================================

class TestRequest:

    def test_get_sin_authorization(self, client, session):
        """Las lecturas no llevan header Authorization."""
        session.request.return_value = make_response(200, {"ok": True})

        resultado = client.get(client.url(path="x.md"))

        assert resultado == {"ok": True}
        headers = session.request.call_args.kwargs["headers"]
        assert "Authorization" not in headers
        assert session.request.call_args.args[0] == "GET"

    def test_put_con_authorization_y_json(self, client, session):
        """Las escrituras llevan token y Content-Type."""
        client.put(client.url(path="x.md"), json={"message": "m"})

        kwargs = session.request.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == f"token {TOKEN}"
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["json"] == {"message": "m"}
        assert kwargs["timeout"] == 30

    def test_request_sin_autenticar(self, client, session):
        client.request("POST", "http://clone.local/v0/site/clone", json={}, authenticated=False)
        assert "Authorization" not in session.request.call_args.kwargs["headers"]

    def test_status_no_2xx(self, client, session):
        """Un 409 se convierte en GitHubAPIError con status."""
        session.request.return_value = make_response(409, {"message": "sha mismatch"})

        with pytest.raises(GitHubAPIError) as exc:
            client.put(client.url(path="x.md"), json={})

        assert exc.value.status == 409
        assert exc.value.is_conflict
        assert exc.value.method == "PUT"
        assert TOKEN not in exc.value.url

    def test_error_de_conexion(self, client, session):
        """Errores de requests dan GitHubAPIError sin status."""
        session.request.side_effect = requests.ConnectionError("sin red")

        with pytest.raises(GitHubAPIError) as exc:
            client.get(client.url(path="x.md"))

        assert exc.value.status is None

    def test_accept_de_github_por_defecto(self, client, session):
        client.get(client.url(path="x.md"))
        assert session.request.call_args.kwargs["headers"]["Accept"] == "application/vnd.github+json"

    def test_accept_propio(self, client, session):
        """Servicios que no son GitHub pueden pedir otro Accept."""
        client.request("POST", "http://clone.local/v0/site/clone", json={}, accept="application/json")
        assert session.request.call_args.kwargs["headers"]["Accept"] == "application/json"

    def test_204_sin_cuerpo(self, client, session):
        session.request.return_value = make_response(204)
        assert client.delete(client.url(root=True, path="git/refs/heads/x")) is None

    def test_cuerpo_no_json(self, client, session):
        resp = make_response(200, None)
        resp.content = b"ok"
        resp.text = "ok"
        resp.json.side_effect = ValueError("no json")
        session.request.return_value = resp

        assert client.get("http://x") == "ok"


# ================================================================
# Sessions
# ================================================================

class TestSession:

    def test_session_inyectada(self, client, session):
        assert client.session is session

    def test_una_session_por_hilo(self):
        """Sin Session inyectada, cada hilo del pool tiene la suya."""
        client = GitHubClient(TOKEN, RepositoryRef("18f", "federalist", "main"))

        with patch("sitekeeper.github.client.requests.Session", side_effect=lambda: MagicMock()):
            principal = client.session
            assert client.session is principal

            with ThreadPoolExecutor(max_workers=1) as pool:
                del_hilo = pool.submit(lambda: client.session).result()

        assert del_hilo is not principal
