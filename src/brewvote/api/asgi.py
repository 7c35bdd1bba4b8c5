"""ASGI entrypoint for the voting API."""

from brewvote.api.app import create_app
from brewvote.containers import build_container

app = create_app(build_container())
