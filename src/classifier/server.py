"""
HTS Classification Service
==========================

FastAPI application exposing the classification pipeline over HTTP:

- ``POST /api/classify`` with ``{"image": "<data URL>"}``
- ``GET /health``

Run it with the ``hts-classify`` console script (or
``python -m classifier.server``). Configuration comes from environment
variables, see `common.config.Settings`.
"""

from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from common.config import Settings, setup_libraries
from common.logging_config import configure_logging
from .handler import ClassificationHandler
from .provider import build_provider
from .reference import build_reference_source


def create_app(
    settings: Settings | None = None,
    handler: ClassificationHandler | None = None,
) -> FastAPI:
    """
    Build the FastAPI app. The handler (and its reference source) is created
    once and shared by all requests; building it also configures the SDK.
    """
    settings = settings or Settings()
    if handler is None:
        # One attempt must stay one HTTP call, also outside main()
        setup_libraries(settings)
        handler = ClassificationHandler(
            settings,
            build_provider(settings),
            build_reference_source(settings),
        )

    app = FastAPI(
        title="HTS Image Classifier",
        description="Suggests ranked HTS codes with duty rates for a product photo.",
    )
    app.state.handler = handler

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/classify")
    async def classify(request: Request) -> JSONResponse:
        body = await request.body()
        # The provider call blocks; keep it off the event loop
        outcome = await run_in_threadpool(app.state.handler.handle, body)
        return JSONResponse(status_code=outcome.status_code, content=outcome.payload)

    return app


def main() -> None:
    """Load settings and serve the API with uvicorn."""
    log = structlog.get_logger(__name__)

    try:
        settings = Settings()
        configure_logging(settings)
        setup_libraries(settings)
    except ValueError as e:
        log.error("Configuration error", error=str(e))
        return

    log.info(
        "Starting classification server",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        llm_provider=settings.LLM_PROVIDER,
        model=settings.CLASSIFY_MODEL,
        hts_document_path=str(settings.HTS_DOCUMENT_PATH),
        hts_document_cache=settings.HTS_DOCUMENT_CACHE,
        credential_configured=bool(settings.LLM_API_KEY),
    )

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
