"""
conftest.py — Fixtures compartidas: sesión HTTP falsa y cliente de GitHub.

Ningún test toca la red. La sesión es un MagicMock cuyo request()
devuelve respuestas armadas con make_response().
"""

from __future__ import annotations

import json as jsonlib
from typing import Any
from unittest.mock import MagicMock

import pytest

from sitekeeper.github.client import GitHubClient
from sitekeeper.github.models import RepositoryRef
from sitekeeper.utils.encoding import encode_b64

TOKEN = "tok123"


def make_response(status: int = 200, body: Any = None) -> MagicMock:
    """Respuesta falsa de requests con status y cuerpo JSON."""
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.content = jsonlib.dumps(body).encode() if body is not None else b""
    resp.text = jsonlib.dumps(body) if body is not None else ""
    return resp


def contents_payload(text: str, sha: str = "sha-file", name: str = "file") -> dict:
    """Respuesta de GET /contents/<path> con el texto en base64."""
    return {"name": name, "type": "file", "sha": sha, "content": encode_b64(text)}


def calls(session: MagicMock) -> list[tuple[str, str]]:
    """(método, url) de cada request hecho con la sesión."""
    return [(c.args[0], c.args[1]) for c in session.request.call_args_list]


@pytest.fixture
def session():
    s = MagicMock()
    s.request.return_value = make_response(200, {})
    return s


@pytest.fixture
def client(session):
    return GitHubClient(
        TOKEN,
        RepositoryRef(owner="18f", name="federalist", branch="main"),
        session=session,
    )
