"""ASGI entrypoint for the label scoring API."""

from catscore.api.app import create_app
from catscore.containers import build_container

app = create_app(build_container())
