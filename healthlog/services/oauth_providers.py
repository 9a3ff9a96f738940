"""
OAuth2 authorization-code login against Linux.do, Google and GitHub.

Each provider is described by a small config record; the flow itself is the
same for all of them:
    1. redirect the browser to the provider's authorize URL
    2. exchange the returned ``code`` for an access token
    3. fetch the user profile with that token
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx

from healthlog.config import settings

HTTP_TIMEOUT = 15.0


class OAuthError(Exception):
    """Raised when a provider rejects the exchange or returns an unusable profile"""


@dataclass(frozen=True)
class OAuthProvider:
    name: str
    client_id: Optional[str]
    client_secret: Optional[str]
    redirect_uri: Optional[str]
    authorize_url: str
    token_url: str
    user_info_url: str
    scope: str


@dataclass(frozen=True)
class OAuthProfile:
    provider_user_id: str
    username: Optional[str]
    email: Optional[str]


def _linuxdo() -> OAuthProvider:
    return OAuthProvider(
        name="linuxdo",
        client_id=settings.LINUX_DO_CLIENT_ID,
        client_secret=settings.LINUX_DO_CLIENT_SECRET,
        redirect_uri=settings.LINUX_DO_REDIRECT_URI,
        authorize_url=settings.LINUX_DO_AUTHORIZE_URL,
        token_url=settings.LINUX_DO_TOKEN_URL,
        user_info_url=settings.LINUX_DO_USER_INFO_URL,
        scope="read",
    )


def _google() -> OAuthProvider:
    return OAuthProvider(
        name="google",
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        user_info_url="https://www.googleapis.com/oauth2/v2/userinfo",
        scope="email profile",
    )


def _github() -> OAuthProvider:
    return OAuthProvider(
        name="github",
        client_id=settings.GITHUB_CLIENT_ID,
        client_secret=settings.GITHUB_CLIENT_SECRET,
        redirect_uri=settings.GITHUB_REDIRECT_URI,
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        user_info_url="https://api.github.com/user",
        scope="user:email",
    )


PROVIDERS: Dict[str, Callable[[], OAuthProvider]] = {
    "linuxdo": _linuxdo,
    "google": _google,
    "github": _github,
}


def get_provider(name: str) -> Optional[OAuthProvider]:
    """Build the provider config from current settings, None for unknown names"""
    factory = PROVIDERS.get(name)
    return factory() if factory else None


def build_authorize_url(provider: OAuthProvider) -> str:
    if not provider.client_id or not provider.redirect_uri:
        raise OAuthError(f"{provider.name} OAuth is not configured")

    params = {
        "client_id": provider.client_id,
        "redirect_uri": provider.redirect_uri,
        "response_type": "code",
        "scope": provider.scope,
    }
    return str(httpx.URL(provider.authorize_url).copy_with(params=params))


def parse_profile(provider_name: str, data: dict) -> OAuthProfile:
    """Map a provider's user-info payload onto (id, username, email)"""
    provider_user_id = data.get("id")
    if provider_user_id is None or provider_user_id == "":
        raise OAuthError(f"{provider_name} profile has no id")

    if provider_name == "github":
        username = data.get("login")
    elif provider_name == "google":
        username = data.get("name")
    else:
        username = data.get("username")

    return OAuthProfile(
        provider_user_id=str(provider_user_id),
        username=username or None,
        email=data.get("email") or None,
    )


def pick_github_email(emails: list) -> Optional[str]:
    """GitHub hides private emails from /user; take the primary verified one"""
    for entry in emails or []:
        if entry.get("primary") and entry.get("verified"):
            return entry.get("email")
    return None


async def exchange_code(client: httpx.AsyncClient, provider: OAuthProvider, code: str) -> str:
    """
    Trade an authorization code for an access token

    Raises:
        OAuthError: On a non-2xx answer or a response without access_token
    """
    response = await client.post(
        provider.token_url,
        data={
            "grant_type": "authorization_code",
            "client_id": provider.client_id,
            "client_secret": provider.client_secret,
            "code": code,
            "redirect_uri": provider.redirect_uri,
        },
        headers={"Accept": "application/json"},
    )
    if response.status_code >= 400:
        raise OAuthError(f"{provider.name} token exchange failed with HTTP {response.status_code}")

    access_token = response.json().get("access_token")
    if not access_token:
        raise OAuthError(f"{provider.name} token response has no access_token")
    return access_token


async def fetch_profile(client: httpx.AsyncClient, provider: OAuthProvider, access_token: str) -> OAuthProfile:
    headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}
    response = await client.get(provider.user_info_url, headers=headers)
    if response.status_code >= 400:
        raise OAuthError(f"{provider.name} user info failed with HTTP {response.status_code}")

    profile = parse_profile(provider.name, response.json())

    if provider.name == "github" and not profile.email:
        emails_response = await client.get("https://api.github.com/user/emails", headers=headers)
        if emails_response.status_code < 400:
            email = pick_github_email(emails_response.json())
            if email:
                profile = OAuthProfile(profile.provider_user_id, profile.username, email)

    return profile


async def authenticate(provider: OAuthProvider, code: str) -> OAuthProfile:
    """Run the code exchange and profile fetch for one callback"""
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as client:
        access_token = await exchange_code(client, provider, code)
        return await fetch_profile(client, provider, access_token)
