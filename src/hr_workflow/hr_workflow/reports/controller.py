from __future__ import annotations

from flask import Flask

from ..common.http import current_context, ok
from ..container import Container
from ..core.constants import API_PREFIX


def register(app: Flask, container: Container) -> None:
    @app.route(f"{API_PREFIX}/summary", methods=["GET"], endpoint="hr_summary")
    def summary():
        return ok(container.summary_service.summary(current_context()))
