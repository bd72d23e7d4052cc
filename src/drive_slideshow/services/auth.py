"""Google sign-in lifecycle and persisted session state."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

import httpx

from drive_slideshow.adapters.google_oauth_client import GoogleOAuthClient
from drive_slideshow.domain.auth import AuthorizationAttempt, DriveUser, Session
from drive_slideshow.domain.errors import (
    DriveSlideshowError,
    ExpiredAuthorizationAttemptError,
    ProviderRequestFailedError,
)
from drive_slideshow.services.drive import PhotoLister
from drive_slideshow.services.events import AuthCompletionChannel
from drive_slideshow.services.store import KeyValueStore, StorageKeys

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """Owns the OAuth authorization-code flow and the current session.

    The in-memory session is a cache of what the store holds. It is only
    replaced by ``restore_session``, a completed sign-in, a token refresh or
    ``sign_out``.
    """

    store: KeyValueStore
    oauth_client: GoogleOAuthClient
    lister: PhotoLister
    channel: AuthCompletionChannel = field(default_factory=AuthCompletionChannel)
    _session: Session | None = field(default=None, init=False, repr=False)
    _generation: int = field(default=0, init=False, repr=False)

    async def begin_sign_in(self) -> str:
        """Reset local auth state and return the provider's consent URL.

        The caller hands control to the identity provider with the returned
        URL; the session arrives later through the OAuth callback.
        """
        url = self.oauth_client.build_authorization_url()
        self._generation += 1
        self._adopt(None)
        await self._clear_keys(StorageKeys.PENDING_AUTHORIZATION)
        logger.info("Starting Google sign-in")
        return url

    async def complete_sign_in(
        self, code: str, now: datetime | None = None
    ) -> Session | None:
        """Exchange a code, fetch the profile and persist the new session.

        Failures are logged and leave the previous state untouched. A sign-out
        or a new sign-in that lands while the exchange is in flight wins.
        """
        current_time = now or datetime.now(tz=UTC)
        generation = self._generation
        try:
            grant = await self.oauth_client.exchange_code(code)
        except (DriveSlideshowError, httpx.HTTPError) as exc:
            logger.error("Authorization code exchange failed: %s", exc)
            return None
        try:
            user = await self.oauth_client.fetch_user_info(grant.access_token)
        except (DriveSlideshowError, httpx.HTTPError) as exc:
            logger.error("Fetching the Google profile failed: %s", exc)
            return None
        if generation != self._generation:
            logger.info("Auth state changed during sign-in, discarding result")
            return None

        session = Session(
            user=user,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=grant.expires_at(current_time),
        )
        await self._persist_session(session)
        self._adopt(session)
        logger.info("Signed in as %s", user.email)
        return session

    async def sign_out(self) -> None:
        """Forget the session everywhere. Never raises."""
        self._generation += 1
        self._adopt(None)
        await self._clear_keys(
            StorageKeys.SESSION + StorageKeys.PENDING_AUTHORIZATION
        )
        logger.info("Signed out")

    def get_current_user(self) -> DriveUser | None:
        """Return the signed-in user, if any."""
        if self._session is None:
            return None
        return self._session.user

    def is_signed_in(self) -> bool:
        """Return True when a session is held in memory."""
        return self._session is not None

    def get_access_token(self) -> str | None:
        """Return the current bearer token, if any."""
        if self._session is None:
            return None
        return self._session.access_token

    @property
    def session(self) -> Session | None:
        return self._session

    async def restore_session(self) -> Session | None:
        """Load a persisted session when both user and token are stored."""
        raw_user = await self.store.get_item(StorageKeys.USER)
        token = await self.store.get_item(StorageKeys.ACCESS_TOKEN)
        if not raw_user or not token:
            logger.info("No stored authentication found")
            return None
        try:
            user = DriveUser.from_json(raw_user)
        except ValueError:
            logger.exception("Stored user record is unreadable, clearing session")
            await self._clear_keys(StorageKeys.SESSION)
            return None

        refresh_token = await self.store.get_item(StorageKeys.REFRESH_TOKEN)
        session = Session(
            user=user,
            access_token=token,
            refresh_token=refresh_token or None,
            expires_at=_parse_expiry(
                await self.store.get_item(StorageKeys.TOKEN_EXPIRES_AT)
            ),
        )
        self._adopt(session)
        logger.info("Loaded stored authentication for %s", user.email)
        return session

    async def record_authorization_code(
        self, code: str, now: datetime | None = None
    ) -> None:
        """Persist a code from the OAuth redirect and notify the app."""
        initiated_at = now or datetime.now(tz=UTC)
        await self.store.set_item(StorageKeys.PENDING_CODE, code)
        await self.store.set_item(
            StorageKeys.PENDING_CODE_TIME,
            str(int(initiated_at.timestamp() * 1000)),
        )
        self.channel.publish()

    async def recover_pending_authorization(
        self, now: datetime | None = None
    ) -> Session | None:
        """Process a leftover authorization code at most once.

        The attempt is exchanged only while it is younger than five minutes.
        Its keys are removed afterwards whatever the outcome.
        """
        current_time = now or datetime.now(tz=UTC)
        attempt = await self._load_pending_attempt()
        if attempt is None:
            await self._clear_keys(StorageKeys.PENDING_AUTHORIZATION)
            return None
        try:
            if attempt.is_expired(current_time):
                raise ExpiredAuthorizationAttemptError(
                    f"Authorization code from {attempt.initiated_at.isoformat()} "
                    "has expired"
                )
            return await self.complete_sign_in(attempt.code, now=current_time)
        except ExpiredAuthorizationAttemptError as exc:
            logger.debug("Discarding pending authorization: %s", exc)
            return None
        finally:
            await self._clear_keys(StorageKeys.PENDING_AUTHORIZATION)

    async def ensure_fresh_token(self, now: datetime | None = None) -> str | None:
        """Return a usable access token, refreshing an expired one.

        An expired session is signed out when no refresh token is stored or
        the token endpoint rejects it with a 4xx, so the user is asked to
        authenticate again. Transport failures and 5xx replies keep the
        stored session and propagate to the caller.
        """
        session = self._session
        if session is None:
            return None
        current_time = now or datetime.now(tz=UTC)
        if not session.is_expired(current_time):
            return session.access_token
        if not session.refresh_token:
            logger.info("Access token expired and no refresh token is stored")
            await self.sign_out()
            return None
        generation = self._generation
        try:
            grant = await self.oauth_client.refresh_access_token(
                session.refresh_token
            )
        except ProviderRequestFailedError as exc:
            if not 400 <= exc.status_code < 500:
                logger.warning("Token endpoint unavailable: %s", exc)
                raise
            logger.warning("Refresh token rejected: %s", exc)
            await self.sign_out()
            return None
        except httpx.HTTPError as exc:
            logger.warning("Refreshing the access token failed: %s", exc)
            raise
        if generation != self._generation:
            return None

        refreshed = Session(
            user=session.user,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token or session.refresh_token,
            expires_at=grant.expires_at(current_time),
        )
        await self._persist_session(refreshed)
        self._adopt(refreshed)
        logger.info("Refreshed access token for %s", session.user.email)
        return refreshed.access_token

    def _adopt(self, session: Session | None) -> None:
        self._session = session
        self.lister.set_access_token(session.access_token if session else None)

    async def _persist_session(self, session: Session) -> None:
        await self.store.set_item(StorageKeys.USER, session.user.to_json())
        await self.store.set_item(StorageKeys.ACCESS_TOKEN, session.access_token)
        if session.refresh_token:
            await self.store.set_item(
                StorageKeys.REFRESH_TOKEN, session.refresh_token
            )
        else:
            await self.store.remove_item(StorageKeys.REFRESH_TOKEN)
        if session.expires_at:
            await self.store.set_item(
                StorageKeys.TOKEN_EXPIRES_AT, session.expires_at.isoformat()
            )
        else:
            await self.store.remove_item(StorageKeys.TOKEN_EXPIRES_AT)

    async def _load_pending_attempt(self) -> AuthorizationAttempt | None:
        code = await self.store.get_item(StorageKeys.PENDING_CODE)
        if not code:
            return None
        raw_time = await self.store.get_item(StorageKeys.PENDING_CODE_TIME)
        try:
            initiated_at = datetime.fromtimestamp(int(raw_time or "") / 1000, tz=UTC)
        except (ValueError, OverflowError, OSError):
            # Unknown age: treat as too old to exchange.
            initiated_at = datetime.min.replace(tzinfo=UTC)
        return AuthorizationAttempt(code=code, initiated_at=initiated_at)

    async def _clear_keys(self, keys: tuple[str, ...]) -> None:
        for key in keys:
            try:
                await self.store.remove_item(key)
            except Exception:
                logger.exception("Failed to remove stored key %s", key)


def _parse_expiry(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        logger.warning("Ignoring unreadable token expiry %r", raw)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
