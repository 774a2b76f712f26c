from __future__ import annotations

import uvicorn
from prometheus_fastapi_instrumentator import Instrumentator

from . import create_app
from .core.config import settings
from .core.logging import setup_logging

setup_logging(settings.LOG_LEVEL, service=settings.APP_NAME)
app = create_app(settings)
Instrumentator().instrument(app).expose(app, include_in_schema=False)


def run() -> None:
    uvicorn.run("hr_portal.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
