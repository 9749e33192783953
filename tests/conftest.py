import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import AsyncIterator, Callable, Iterator

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-secret")
os.environ.setdefault("APP_ENV", "test")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlmodel import Session, SQLModel, create_engine

import db as app_db
import models  # noqa: F401
from config import get_settings
from db import get_session
from main import create_app
from tokens import TokenCodec


@pytest.fixture
def engine(monkeypatch):
    # Fresh SQLite file per test; a file rather than :memory: so threadpool
    # workers share the same database.
    tmp = tempfile.TemporaryDirectory()
    db_url = f"sqlite:///{Path(tmp.name) / 'test.db'}"
    engine = create_engine(db_url, connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    monkeypatch.setattr(app_db, "engine", engine)
    try:
        yield engine
    finally:
        with suppress(Exception):
            engine.dispose()
        tmp.cleanup()


@pytest.fixture
def test_app(engine) -> Iterator[FastAPI]:
    def _override_get_session():
        with Session(engine) as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_session] = _override_get_session
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def db_session(engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def codec() -> TokenCodec:
    settings = get_settings()
    return TokenCodec(settings.access_token_secret, settings.token_ttl_seconds)


@pytest.fixture
def login_as(client: AsyncClient, codec: TokenCodec) -> Callable[[str], None]:
    """Switch the client's session cookie to a token for the given email."""

    def _login(email: str) -> None:
        client.cookies.clear()
        client.cookies.set("token", codec.issue({"email": email}))

    return _login


@pytest.fixture
def listing_payload() -> Callable[..., dict]:
    def _payload(**overrides) -> dict:
        payload = {
            "food_name": "Bread",
            "food_quantity": 5,
            "pickup_location": "Main St 1",
            "expire_date": "2026-11-01T12:00:00",
            "donor_email": "a@x.com",
            "donor_name": "Ada",
            "status": "Available",
        }
        payload.update(overrides)
        return payload

    return _payload
