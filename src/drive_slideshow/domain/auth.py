"""Domain models for the signed-in Google identity."""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta

AUTHORIZATION_ATTEMPT_TTL = timedelta(minutes=5)


@dataclass(frozen=True)
class DriveUser:
    """Profile of the Google account the slideshow is signed in with."""

    id: str
    email: str
    name: str
    photo: str | None = None

    def to_json(self) -> str:
        """Serialize the user in the persisted storage format."""
        payload: dict[str, str] = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
        }
        if self.photo:
            payload["photo"] = self.photo
        return json.dumps(payload)

    @classmethod
    def from_json(cls, raw: str) -> "DriveUser":
        """Parse a persisted user blob."""
        data = json.loads(raw)
        if not isinstance(data, dict) or not data.get("id"):
            raise ValueError("Stored user record is malformed")
        return cls(
            id=str(data["id"]),
            email=str(data.get("email", "")),
            name=str(data.get("name", "")),
            photo=data.get("photo") or None,
        )


@dataclass(frozen=True)
class Session:
    """An authenticated identity: a user record plus its bearer token."""

    user: DriveUser
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """Return True once the access token has passed its expiry."""
        if self.expires_at is None:
            return False
        return now >= self.expires_at


@dataclass(frozen=True)
class AuthorizationAttempt:
    """A pending authorization code waiting to be exchanged."""

    code: str
    initiated_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Attempts are only exchangeable within five minutes of the redirect."""
        return now - self.initiated_at >= AUTHORIZATION_ATTEMPT_TTL


@dataclass(frozen=True)
class TokenGrant:
    """Token endpoint response."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    scope: str | None = None

    def expires_at(self, now: datetime) -> datetime | None:
        if self.expires_in is None:
            return None
        return now + timedelta(seconds=self.expires_in)
