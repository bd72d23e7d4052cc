"""ASGI entrypoint for the slideshow API."""

from drive_slideshow.api.app import create_app
from drive_slideshow.containers import build_container

app = create_app(build_container())
