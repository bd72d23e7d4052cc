"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from drive_slideshow.api.models import AuthStatusOut, UserOut
from drive_slideshow.api.settings import router as settings_router
from drive_slideshow.api.slideshow import router as slideshow_router
from drive_slideshow.app_logging import configure_logging
from drive_slideshow.containers import AppContainer
from drive_slideshow.domain.errors import ConfigurationMissingError

_CALLBACK_PAGE = """<!doctype html>
<html>
  <head><title>Drive Slideshow</title></head>
  <body>
    <h1>{title}</h1>
    <p>{message}</p>
  </body>
</html>
"""


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.auth_service.restore_session()
            await state_container.auth_service.recover_pending_authorization()
        except Exception:
            logger.exception("Failed to restore authentication state")
        await state_container.slideshow_controller.start()
        yield
        await state_container.slideshow_controller.stop()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(settings_router)
    app.include_router(slideshow_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/auth/login")
    async def login(request: Request) -> RedirectResponse:
        """Send the browser to Google's consent screen."""
        state_container: AppContainer = request.app.state.container
        try:
            url = await state_container.auth_service.begin_sign_in()
        except ConfigurationMissingError as exc:
            logger.error("Sign-in unavailable: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
            ) from exc
        return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    @app.get("/oauth/callback", response_class=HTMLResponse)
    async def oauth_callback(
        request: Request, code: str | None = None, error: str | None = None
    ) -> HTMLResponse:
        """Receive the OAuth redirect and hand the code to the running app."""
        state_container: AppContainer = request.app.state.container
        if error or not code:
            logger.warning("OAuth callback without a code: %s", error or "missing")
            return HTMLResponse(
                _CALLBACK_PAGE.format(
                    title="Sign-in failed",
                    message="Google did not return an authorization code.",
                ),
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        await state_container.auth_service.record_authorization_code(code)
        return HTMLResponse(
            _CALLBACK_PAGE.format(
                title="Signed in",
                message="You can close this window and return to the slideshow.",
            )
        )

    @app.post("/auth/logout")
    async def logout(request: Request) -> dict[str, str]:
        """Sign out and clear the slideshow."""
        state_container: AppContainer = request.app.state.container
        await state_container.auth_service.sign_out()
        await state_container.slideshow_controller.check_auth_status()
        return {"status": "ok"}

    @app.get("/auth/me")
    async def auth_status(request: Request) -> AuthStatusOut:
        """Return whether a user is signed in, and who."""
        state_container: AppContainer = request.app.state.container
        user = state_container.auth_service.get_current_user()
        if user is None:
            return AuthStatusOut(signed_in=False)
        return AuthStatusOut(
            signed_in=True,
            user=UserOut(id=user.id, email=user.email, name=user.name, photo=user.photo),
        )

    return app
