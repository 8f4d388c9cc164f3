"""
test_cloner.py — Tests para el clonado de sitios.
"""

from __future__ import annotations

import pytest

from conftest import calls, make_response
from sitekeeper.github.cloner import (
    CloneDestination,
    CloneSource,
    RepositoryCloner,
    validate_clone_request,
)
from sitekeeper.github.errors import GitHubAPIError, PreconditionError

SERVICE = "http://clone.local"


def _cloner(client, **kwargs) -> RepositoryCloner:
    return RepositoryCloner(client, service_url=SERVICE, **kwargs)


class TestValidacion:

    @pytest.mark.parametrize("source,destination", [
        (None, CloneDestination(repository="nuevo")),
        (CloneSource(owner="18f"), CloneDestination(repository="nuevo")),
        (CloneSource(repository="federalist"), CloneDestination(repository="nuevo")),
        (CloneSource(owner="18f", repository="federalist"), None),
        (CloneSource(owner="18f", repository="federalist"), CloneDestination()),
    ])
    def test_datos_incompletos(self, source, destination):
        with pytest.raises(PreconditionError, match="Missing source or destination"):
            validate_clone_request(source, destination)

    def test_clone_incompleto_no_hace_requests(self, client, session):
        """La validación corre antes de cualquier request."""
        with pytest.raises(PreconditionError):
            _cloner(client).clone(CloneSource(owner="18f"), CloneDestination(repository="x"))

        session.request.assert_not_called()


class TestClone:

    def test_en_organizacion(self, client, session):
        session.request.return_value = make_response(201, {})

        _cloner(client).clone(
            CloneSource(owner="18f", repository="federalist"),
            CloneDestination(repository="mi-sitio", organization="mi-org", branch="gh-pages"),
        )

        (m1, u1), (m2, u2), (m3, u3) = calls(session)
        assert m1 == "GET" and u1.startswith("https://api.github.com/repos/18f/federalist?")
        assert m2 == "POST" and u2.startswith("https://api.github.com/orgs/mi-org/repos?")
        assert m3 == "POST" and u3 == f"{SERVICE}/v0/site/clone"

        crear, clonar = session.request.call_args_list[1:]
        assert crear.kwargs["json"] == {"name": "mi-sitio"}
        assert clonar.kwargs["json"] == {
            "sourceOwner": "18f",
            "sourceRepo": "federalist",
            "destinationOrg": "mi-org",
            "destinationRepo": "mi-sitio",
            "destinationBranch": "gh-pages",
            "engine": "jekyll",
        }
        assert "Authorization" not in clonar.kwargs["headers"]
        assert clonar.kwargs["headers"]["Accept"] == "application/json"
        assert crear.kwargs["headers"]["Accept"] == "application/vnd.github+json"

    def test_en_usuario(self, client, session):
        """Sin organización se crea en user/repos y no se manda destinationOrg."""
        session.request.return_value = make_response(201, {})

        _cloner(client, default_engine="hugo").clone(
            CloneSource(owner="18f", repository="federalist"),
            CloneDestination(repository="mi-sitio"),
        )

        assert calls(session)[1][1].startswith("https://api.github.com/user/repos?")
        payload = session.request.call_args.kwargs["json"]
        assert "destinationOrg" not in payload
        assert payload["destinationBranch"] == "main"
        assert payload["engine"] == "hugo"

    def test_branch_de_trabajo_por_defecto(self, client):
        cloner = _cloner(client, branch=lambda: "_draft-abc")
        payload = cloner.clone_payload(
            CloneSource(owner="18f", repository="federalist"),
            CloneDestination(repository="x", engine="jekyll"),
        )
        assert payload["destinationBranch"] == "_draft-abc"

    def test_origen_inaccesible_corta_la_serie(self, client, session):
        session.request.return_value = make_response(404, {"message": "Not Found"})

        with pytest.raises(GitHubAPIError):
            _cloner(client).clone(
                CloneSource(owner="18f", repository="privado"),
                CloneDestination(repository="x"),
            )

        assert session.request.call_count == 1
