"""Error types raised across the slideshow client."""


class DriveSlideshowError(Exception):
    """Base exception for slideshow client failures."""


class ConfigurationMissingError(DriveSlideshowError):
    """Raised when required OAuth client credentials are not configured."""


class UnauthenticatedError(DriveSlideshowError):
    """Raised when an operation needs an access token and none is held."""


class ProviderRequestFailedError(DriveSlideshowError):
    """Raised when a Google endpoint answers with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Google API error: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


class InvalidFolderUrlError(DriveSlideshowError):
    """Raised when a stored or submitted folder URL has no folder id."""


class ExpiredAuthorizationAttemptError(DriveSlideshowError):
    """Raised when a pending authorization code is too old to exchange."""


class PhotosNotConfiguredError(DriveSlideshowError):
    """Raised when no shared folder URL has been saved yet."""
