"""Shared route dependencies.

Routes receive their store and LLM client through FastAPI's Depends, so
tests can swap them with app.dependency_overrides. Dependencies that own an
HTTP client yield it and close it once the response is sent.
"""

from __future__ import annotations

from collections.abc import Iterator

import httpx

from sparkskool.config import get_data_dir
from sparkskool.core.slides import SlideGenerator
from sparkskool.games.sessions import GameSessionStore, get_session_store
from sparkskool.llm.client import LLMClient
from sparkskool.storage.local_store import LocalStore


def get_store() -> LocalStore:
    return LocalStore(get_data_dir())


def get_llm_client() -> LLMClient:
    return LLMClient()


def get_slide_generator() -> Iterator[SlideGenerator]:
    with SlideGenerator() as generator:
        yield generator


def get_http_client() -> Iterator[httpx.Client]:
    with httpx.Client(timeout=10.0) as client:
        yield client


def get_game_sessions() -> GameSessionStore:
    return get_session_store()
