"""ASGI entrypoint for the nutrition normalizer API."""

from nutrition_normalizer.api.app import create_app
from nutrition_normalizer.containers import build_container

app = create_app(build_container())
