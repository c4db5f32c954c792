import logging
import time
from typing import Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from .config import Settings, load_settings
from .generation import GeminiTextClient, MermaidContentGenerator
from .mermaid_client import GET_MERMAID_CONTENT_API_URL

logger = logging.getLogger("austen")


class MermaidContentRequest(BaseModel):
    bookTitle: str


def build_generator(settings: Settings) -> MermaidContentGenerator:
    client = GeminiTextClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout_seconds=settings.request_timeout_seconds,
    )
    return MermaidContentGenerator(client)


def create_app(
    settings: Optional[Settings] = None,
    generator: Optional[MermaidContentGenerator] = None,
) -> FastAPI:
    settings = settings or load_settings()
    generator = generator or build_generator(settings)

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.state.generator = generator

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        started = time.perf_counter()
        logger.info("request.started method=%s path=%s", request.method, request.url.path)
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                "request.failed method=%s path=%s elapsed_ms=%.2f",
                request.method,
                request.url.path,
                elapsed_ms,
            )
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "request.completed method=%s path=%s status=%s elapsed_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post(GET_MERMAID_CONTENT_API_URL)
    async def get_mermaid_content(body: MermaidContentRequest) -> Dict[str, str]:
        # Failures are reported in the body; the status stays 200.
        return await run_in_threadpool(app.state.generator.generate, body.bookTitle)

    return app


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.info(
        "austen.startup host=%s port=%s model=%s key_configured=%s",
        settings.host,
        settings.port,
        settings.gemini_model,
        bool(settings.gemini_api_key),
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
