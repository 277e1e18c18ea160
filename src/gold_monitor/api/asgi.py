"""ASGI entrypoint for the gold price monitor API."""

from gold_monitor.api.app import create_app
from gold_monitor.containers import build_container

app = create_app(build_container())
