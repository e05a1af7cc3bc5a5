"""Shared pytest fixtures for the results mirror."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import pytest
from sqlalchemy.orm import Session

from lotofacil_mirror import create_app
from lotofacil_mirror.config import TestingConfig
from lotofacil_mirror.db import create_app_engine, create_session_factory, dispose_db
from lotofacil_mirror.errors import UpstreamError
from lotofacil_mirror.models.base import Base
from lotofacil_mirror.schemas.resultado import CaixaDrawSchema, Draw


DEFAULT_DEZENAS = ["01", "03", "04", "06", "07", "09", "10", "12", "14", "15", "17", "19", "20", "22", "25"]


def caixa_payload(
    numero: int,
    data: str = "05/12/2025",
    dezenas: Iterable[str | int] | None = None,
) -> dict:
    """A draw as the CAIXA API serves it (extra fields included)."""

    return {
        "tipoJogo": "LOTOFACIL",
        "numero": numero,
        "dataApuracao": data,
        "listaDezenas": list(dezenas) if dezenas is not None else list(DEFAULT_DEZENAS),
        "acumulado": False,
        "numeroConcursoProximo": numero + 1,
    }


class FakeDrawSource:
    """Scriptable stand-in for the upstream client.

    `calls` records "latest" and every per-draw number requested, in order.
    """

    def __init__(self) -> None:
        self._schema = CaixaDrawSchema()
        self.draws: dict[int, Draw] = {}
        self.failing: set[int] = set()
        self.latest_error: UpstreamError | None = None
        self.calls: list[object] = []

    def publish(self, *numbers: int, data: str = "05/12/2025", dezenas: Iterable[str | int] | None = None) -> None:
        for n in numbers:
            self.draws[n] = self._schema.load(caixa_payload(n, data=data, dezenas=dezenas))

    def fetch_latest(self) -> Draw:
        self.calls.append("latest")
        if self.latest_error is not None:
            raise self.latest_error
        return self.draws[max(self.draws)]

    def fetch_draw(self, concurso: int) -> Draw | None:
        self.calls.append(concurso)
        if concurso in self.failing:
            raise UpstreamError(message=f"Upstream responded 500 for draw {concurso}")
        return self.draws.get(concurso)

    def close(self) -> None:
        self.calls.append("close")


@pytest.fixture()
def source() -> FakeDrawSource:
    return FakeDrawSource()


@pytest.fixture()
def db_session() -> Iterator[Session]:
    """Session on a fresh in-memory database."""

    engine = create_app_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def app(source: FakeDrawSource):
    app = create_app(TestingConfig)
    app.extensions["caixa_client"].close()
    app.extensions["caixa_client"] = source
    yield app
    dispose_db(app)


@pytest.fixture()
def client(app):
    return app.test_client()
