"""Google OAuth 2.0 and userinfo API client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

import httpx

from drive_slideshow.domain.auth import DriveUser, TokenGrant
from drive_slideshow.domain.errors import (
    ConfigurationMissingError,
    ProviderRequestFailedError,
)

AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
USERINFO_ENDPOINT = "https://www.googleapis.com/oauth2/v2/userinfo"
OAUTH_SCOPES = (
    "https://www.googleapis.com/auth/drive.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
)


class GoogleOAuthClient(Protocol):
    """Interface for the Google identity endpoints."""

    def build_authorization_url(self, state: str | None = None) -> str:
        """Return the consent-screen URL the user must be sent to."""

    async def exchange_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for tokens."""

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Obtain a new access token from a refresh token."""

    async def fetch_user_info(self, access_token: str) -> DriveUser:
        """Return the profile of the token's owner."""


@dataclass
class HttpxGoogleOAuthClient(GoogleOAuthClient):
    """Google OAuth client implemented with httpx."""

    client_id: str | None
    client_secret: str | None
    redirect_uri: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, client_id: str | None, client_secret: str | None, redirect_uri: str
    ) -> "HttpxGoogleOAuthClient":
        """Create an OAuth client with a managed httpx session."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            http_client=httpx.AsyncClient(),
        )

    def _require_client_id(self) -> str:
        if not self.client_id:
            raise ConfigurationMissingError(
                "Google OAuth client id is not configured. Set GOOGLE_CLIENT_ID."
            )
        return self.client_id

    def _require_credentials(self) -> tuple[str, str]:
        client_id = self._require_client_id()
        if not self.client_secret:
            raise ConfigurationMissingError(
                "Google OAuth client secret is not configured. "
                "Set GOOGLE_CLIENT_SECRET."
            )
        return client_id, self.client_secret

    def build_authorization_url(self, state: str | None = None) -> str:
        """Build the consent URL with offline access and forced consent."""
        params = {
            "client_id": self._require_client_id(),
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(OAUTH_SCOPES),
            "response_type": "code",
            "access_type": "offline",
            "prompt": "consent",
            "include_granted_scopes": "true",
        }
        if state:
            params["state"] = state
        return f"{AUTHORIZATION_ENDPOINT}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code at the token endpoint."""
        client_id, client_secret = self._require_credentials()
        return await self._post_token(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
            }
        )

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Use a refresh token to get a new access token."""
        client_id, client_secret = self._require_credentials()
        grant = await self._post_token(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )
        if grant.refresh_token is None:
            # Google omits the refresh token on refresh responses.
            return TokenGrant(
                access_token=grant.access_token,
                refresh_token=refresh_token,
                expires_in=grant.expires_in,
                scope=grant.scope,
            )
        return grant

    async def _post_token(self, form: dict[str, str]) -> TokenGrant:
        response = await self.http_client.post(TOKEN_ENDPOINT, data=form, timeout=15)
        if response.is_error:
            raise ProviderRequestFailedError(response.status_code, response.text)
        try:
            data = response.json()
            access_token = data.get("access_token")
            expires_in = data.get("expires_in")
            grant = TokenGrant(
                access_token=access_token,
                refresh_token=data.get("refresh_token"),
                expires_in=int(expires_in) if expires_in is not None else None,
                scope=data.get("scope"),
            )
        except (ValueError, TypeError, AttributeError) as exc:
            raise ProviderRequestFailedError(
                response.status_code, response.text
            ) from exc
        if not access_token:
            raise ProviderRequestFailedError(
                response.status_code, "Token response did not include access_token"
            )
        return grant

    async def fetch_user_info(self, access_token: str) -> DriveUser:
        """Fetch the signed-in user's profile."""
        response = await self.http_client.get(
            USERINFO_ENDPOINT,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=15,
        )
        if response.is_error:
            raise ProviderRequestFailedError(response.status_code, response.text)
        try:
            data = response.json()
            return DriveUser(
                id=str(data["id"]),
                email=data.get("email", ""),
                name=data.get("name", ""),
                photo=data.get("picture"),
            )
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise ProviderRequestFailedError(
                response.status_code, response.text
            ) from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
