"""Fixtures for endpoint tests."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
import respx
from httpx import AsyncClient


@pytest.fixture
async def github_session(client: AsyncClient) -> AsyncClient:
    """Client that completed a GitHub login as ``octocat``."""
    with respx.mock(assert_all_called=False) as github:
        github.post("https://github.com/login/oauth/access_token").mock(
            return_value=httpx.Response(200, json={"access_token": "gho_abc"})
        )
        github.get("https://api.github.com/user").mock(
            return_value=httpx.Response(
                200,
                json={"id": 7, "login": "octocat", "name": "The Octocat", "email": "a@x.com"},
            )
        )
        start = await client.get("/auth/github")
        state = parse_qs(urlsplit(start.headers["location"]).query)["state"][0]
        await client.get("/auth/github/callback", params={"code": "xyz", "state": state})

    assert "session" in client.cookies
    return client
