"""
FastAPI dependencies for dependency injection.

The store, queue and code length cell are created once per application
in its lifespan (see main.py) and kept on ``app.state``; these
dependencies hand them to routes and services.

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (override get_url_service with a fake)
"""

from fastapi import Depends, Request

from kvshortener.config import Settings
from kvshortener.queue.strategies import QueueStrategy
from kvshortener.services.settings_store import CodeLengthSetting
from kvshortener.storage import KeyValueStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> KeyValueStore:
    return request.app.state.store


def get_queue(request: Request) -> QueueStrategy:
    return request.app.state.queue


def get_code_length(request: Request) -> CodeLengthSetting:
    return request.app.state.code_length


def get_url_service(
    store: KeyValueStore = Depends(get_store),
    code_length: CodeLengthSetting = Depends(get_code_length),
    queue: QueueStrategy = Depends(get_queue),
    settings: Settings = Depends(get_settings)
):
    """
    Get URLService with all dependencies injected.

    - Controller depends on service
    - Service depends on infrastructure (store, queue, code length)
    """
    from kvshortener.services.url_service import URLService
    return URLService(store=store, code_length=code_length, queue=queue, settings=settings)
