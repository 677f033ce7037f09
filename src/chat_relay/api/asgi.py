"""ASGI entrypoint for the chat relay API."""

from chat_relay.api.app import create_app
from chat_relay.containers import build_container

app = create_app(build_container())
