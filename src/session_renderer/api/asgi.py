"""ASGI entrypoint for the session renderer API."""

from session_renderer.api.app import create_app
from session_renderer.containers import build_container

app = create_app(build_container())
