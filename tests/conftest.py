from __future__ import annotations

from collections.abc import Iterator
from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.api.routes import get_engine
from app.core.models import ExportOptions
from app.engine.service import TemplateEngine
from app.main import create_app
from app.store.template_store import InMemoryTemplateStore
from tests.builders import diaper_change_workbook, workbook_bytes


@pytest.fixture()
def store() -> InMemoryTemplateStore:
    return InMemoryTemplateStore()


@pytest.fixture()
def engine(store: InMemoryTemplateStore) -> TemplateEngine:
    return TemplateEngine(store)


@pytest.fixture()
def client(engine: TemplateEngine) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def diaper_template_bytes() -> bytes:
    return workbook_bytes(diaper_change_workbook())


@pytest.fixture()
def options() -> ExportOptions:
    return ExportOptions(
        today=date(2024, 1, 15),
        year_month="2024年01月",
        first_month="2024年01月",
        second_month="2024年02月",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    )
