"""ASGI entrypoint for the leftover tracker API."""

from leftover_tracker.api.app import create_app
from leftover_tracker.containers import build_container

app = create_app(build_container())
