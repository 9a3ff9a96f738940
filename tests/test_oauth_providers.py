from __future__ import annotations

import pytest
from httpx import URL

from healthlog.services import oauth_providers
from healthlog.services.oauth_providers import (
    OAuthError,
    OAuthProvider,
    build_authorize_url,
    get_provider,
    parse_profile,
    pick_github_email,
)


def _provider(**overrides):
    values = dict(
        name="github",
        client_id="cid",
        client_secret="secret",
        redirect_uri="https://api.example.test/api/auth/github/callback",
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        user_info_url="https://api.github.com/user",
        scope="user:email",
    )
    values.update(overrides)
    return OAuthProvider(**values)


def test_get_provider_knows_three_providers():
    assert get_provider("linuxdo").scope == "read"
    assert get_provider("google").scope == "email profile"
    assert get_provider("github").scope == "user:email"
    assert get_provider("facebook") is None


def test_authorize_url_carries_code_flow_params():
    url = URL(build_authorize_url(_provider()))

    assert url.host == "github.com"
    assert url.params["client_id"] == "cid"
    assert url.params["redirect_uri"] == "https://api.example.test/api/auth/github/callback"
    assert url.params["response_type"] == "code"
    assert url.params["scope"] == "user:email"


def test_authorize_url_requires_configuration():
    with pytest.raises(OAuthError):
        build_authorize_url(_provider(client_id=None))


def test_parse_profile_per_provider():
    github = parse_profile("github", {"id": 101, "login": "octo", "email": None})
    assert (github.provider_user_id, github.username, github.email) == ("101", "octo", None)

    google = parse_profile("google", {"id": "g-1", "name": "Ann", "email": "ann@example.test"})
    assert (google.provider_user_id, google.username, google.email) == ("g-1", "Ann", "ann@example.test")

    linuxdo = parse_profile("linuxdo", {"id": 5, "username": "ld"})
    assert (linuxdo.provider_user_id, linuxdo.username) == ("5", "ld")


def test_parse_profile_without_id_fails():
    with pytest.raises(OAuthError):
        parse_profile("google", {"name": "Nobody"})


def test_pick_github_email_prefers_primary_verified():
    emails = [
        {"email": "old@example.test", "primary": False, "verified": True},
        {"email": "main@example.test", "primary": True, "verified": True},
    ]
    assert pick_github_email(emails) == "main@example.test"
    assert pick_github_email([{"email": "x@example.test", "primary": True, "verified": False}]) is None
    assert pick_github_email([]) is None


class _FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class _FakeClient:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    async def get(self, url, headers=None):
        self.calls.append(("GET", url))
        return self.responses[url]

    async def post(self, url, data=None, headers=None):
        self.calls.append(("POST", url))
        return self.responses[url]


def test_fetch_profile_falls_back_to_github_emails():
    import asyncio

    client = _FakeClient({
        "https://api.github.com/user": _FakeResponse(200, {"id": 9, "login": "octo", "email": None}),
        "https://api.github.com/user/emails": _FakeResponse(
            200, [{"email": "octo@example.test", "primary": True, "verified": True}]
        ),
    })

    profile = asyncio.run(oauth_providers.fetch_profile(client, _provider(), "token"))

    assert profile.email == "octo@example.test"
    assert ("GET", "https://api.github.com/user/emails") in client.calls


def test_exchange_code_rejects_missing_access_token():
    import asyncio

    client = _FakeClient({
        "https://github.com/login/oauth/access_token": _FakeResponse(200, {"error": "bad_verification_code"}),
    })

    with pytest.raises(OAuthError):
        asyncio.run(oauth_providers.exchange_code(client, _provider(), "bad-code"))
