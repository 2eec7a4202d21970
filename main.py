import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from kvshortener.config import Settings, settings as default_settings
from kvshortener.exceptions import ShortenerError
from kvshortener.hit_processor.hit_worker import HitWorker
from kvshortener.logging_config import setup_logging
from kvshortener.queue.strategies import InMemoryQueue
from kvshortener.services.settings_store import CodeLengthSetting
from kvshortener.services.stats_engine import StatsEngine
from kvshortener.storage import KeyValueStoreFactory
from kvshortener.api.v1 import index, urls, redirect

logger = logging.getLogger("kvshortener.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the store, load settings, run the hit worker; undo on shutdown.

    A store that cannot be opened raises out of here and aborts startup.
    """
    settings: Settings = app.state.settings

    try:
        store = KeyValueStoreFactory.create(settings=settings)
    except ShortenerError:
        logger.critical("Couldn't open the key-value store at %s", settings.store_path)
        raise

    code_length = CodeLengthSetting(default=settings.default_code_length)
    try:
        code_length.load(store)
    except ShortenerError:
        store.close()
        logger.critical("Couldn't get settings from the key-value store")
        raise

    queue = InMemoryQueue(maxsize=settings.queue_max_size)
    worker = HitWorker(
        queue=queue,
        stats=StatsEngine(store),
        batch_size=settings.queue_batch_size,
        block_time=settings.queue_block_time
    )
    worker_task = asyncio.create_task(worker.start())

    app.state.store = store
    app.state.code_length = code_length
    app.state.queue = queue
    app.state.worker = worker

    try:
        yield
    finally:
        worker.stop()
        worker_task.cancel()
        await asyncio.gather(worker_task, return_exceptions=True)
        await worker.drain()
        store.close()


async def server_failure_handler(request: Request, exc: ShortenerError):
    """Turn core failures (generation exhausted, store errors) into a 500"""
    logger.error(
        "Failed during HTTP request %s %s: %s",
        request.method, request.url.path, exc,
        exc_info=exc
    )
    return PlainTextResponse("Server failure", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application for the given settings"""
    settings = settings or default_settings
    setup_logging(level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="A URL shortener backed by an embedded key-value store",
        debug=settings.debug,
        lifespan=lifespan,
        # Root-level pages would shadow codes such as "docs" or "redoc"
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json"
    )
    app.state.settings = settings
    app.add_exception_handler(ShortenerError, server_failure_handler)

    ######## Include routers
    # The catch-all /{short_code} routes go last
    app.include_router(index.router)
    app.include_router(urls.router, prefix="/api/v1")
    app.include_router(redirect.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
