"""README Forge service entry point.

Telemetry is configured before the app factory is imported so ADK and the
logging instrumentation see the global providers.

Run with::

    uvicorn src.main:app --host 0.0.0.0 --port 5000

or through the ``readme-forge`` console script.
"""

import os

from src.config.telemetry import configure_telemetry

configure_telemetry()

import uvicorn  # noqa: E402

from src.api.app import create_app  # noqa: E402

app = create_app()


def run() -> None:
    uvicorn.run(
        "src.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
    )
