from decimal import Decimal

import pytest

from daxdata.data.memory_repository import InMemoryDAXRepository
from daxdata.data.sql_repository import SQLDAXRepository
from daxdata.database import build_engine, create_db_and_tables
from daxdata.models.dax import DAXRecord


def make_record(
    company: str = "Siemens AG",
    ticker: str = "SIE",
    metric: str = "EBITDA",
    year: int = 2025,
    value: Decimal | None = Decimal("15859000000.00"),
    report_type: str = "income",
    currency: str = "EUR",
) -> DAXRecord:
    return DAXRecord(
        company=company,
        ticker=ticker,
        report_type=report_type,
        metric=metric,
        year=year,
        value=value,
        currency=currency,
    )


@pytest.fixture
def sql_engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def memory_repo() -> InMemoryDAXRepository:
    return InMemoryDAXRepository()


@pytest.fixture
def sql_repo(sql_engine) -> SQLDAXRepository:
    return SQLDAXRepository(engine=sql_engine)


@pytest.fixture(params=["memory", "database"])
def repo(request):
    """두 저장소 구현에 동일한 계약 테스트 적용"""
    if request.param == "memory":
        return InMemoryDAXRepository()
    return SQLDAXRepository(engine=request.getfixturevalue("sql_engine"))
