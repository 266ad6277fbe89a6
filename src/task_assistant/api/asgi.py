"""ASGI entrypoint for the task assistant API."""

from task_assistant.api.app import create_app
from task_assistant.containers import build_container

app = create_app(build_container())
