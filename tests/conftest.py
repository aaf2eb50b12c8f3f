from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from orderlink.adapters.hooks import InProcessHookDispatcher
from orderlink.adapters.sqlalchemy import start_mappers
from orderlink.adapters.sqlalchemy.migrations import upgrade_head
from orderlink.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ENTITLEMENT_API_URL",
        "ENTITLEMENT_API_TOKEN",
        "ORDERLINK_AUTH_SECRET",
        "ORDERLINK_OPERATORS",
        "ORDERLINK_PAID_STATUSES",
        "ORDERLINK_MATCH_WINDOW_SECONDS",
        "ORDERLINK_SUBSCRIPTIONS_ENABLED",
        "ORDERLINK_TOKEN_TTL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def hook_dispatcher() -> InProcessHookDispatcher:
    return InProcessHookDispatcher()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
    hook_dispatcher: InProcessHookDispatcher,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(hooks=hook_dispatcher)

    try:
        yield factory
    finally:
        shutdown()
